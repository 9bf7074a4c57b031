import select

import pytest

from robsock.netif import Port, split_host


def _wait_readable(port, timeout=5.0):
    ready, _, _ = select.select([port.fileno()], [], [], timeout)
    assert ready, "no datagram arrived"


def test_split_host_plain_name_uses_default_port():
    assert split_host("localhost", 6000) == ("localhost", 6000)


def test_split_host_with_port():
    assert split_host("simhost:7000", 6000) == ("simhost", 7000)


def test_split_host_empty_name_before_colon_is_not_split():
    assert split_host(":7000", 6000) == (":7000", 6000)


def test_split_host_non_numeric_port_is_not_split():
    assert split_host("simhost:abc", 6000) == ("simhost:abc", 6000)


def test_split_host_truncates_long_names():
    host, port = split_host("h" * 400, 6000)
    assert len(host) == 255
    assert port == 6000


def test_port_parses_host_and_port():
    port = Port(6000, "simhost:6123")
    assert port.host == "simhost"
    assert port.remote_port == 6123


def test_send_before_init_raises():
    port = Port(6000, "127.0.0.1")
    with pytest.raises(OSError):
        port.send_info(b"x")


def test_send_without_remote_raises():
    with Port() as port:
        with pytest.raises(OSError):
            port.send_info(b"x")


def test_nonblocking_recv_without_data_raises():
    port = Port().init(blocking=False)
    try:
        with pytest.raises(BlockingIOError):
            port.recv_info(64)
    finally:
        port.close()


def test_round_trip_over_loopback():
    with Port() as server:
        server_port = server.local_address[1]
        with Port(server_port, "127.0.0.1") as client:
            assert client.remote == ("127.0.0.1", server_port)
            client.send_info(b"<Robot/>\0")
            _wait_readable(server)
            assert server.recv_info(4096) == b"<Robot/>\0"
            assert server.last_sender[1] == client.local_address[1]

            server.set_remote(server.last_sender)
            server.send_info(b"<Reply/>")
            _wait_readable(client)
            assert client.recv_info() == b"<Reply/>"
            assert client.last_sender[1] == server_port


def test_close_makes_port_unusable():
    port = Port().init()
    port.close()
    with pytest.raises(OSError):
        port.fileno()


def test_unresolvable_host_raises():
    port = Port(6000, "no-such-host.invalid")
    with pytest.raises(OSError):
        port.init()
    with pytest.raises(OSError):
        port.fileno()