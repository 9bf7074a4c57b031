import socket
import threading
from contextlib import contextmanager

import pytest

from robsock import api
from robsock.parser import ParseError
from robsock.roblink import LinkError, drive_motors_message, register_message

OK_REPLY = b'<Reply Status="Ok"><Parameters NBeacons="1" CycleTime="50" SimTime="2000"/></Reply>\0'
REFUSED_REPLY = b'<Reply Status="Refused"></Reply>\0'


class FakeSimulator:
    def __init__(self, reply):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(5)
        self.reply = reply
        self.registration = None
        self.robot = None
        self.thread = threading.Thread(target=self._serve, daemon=True)
        self.thread.start()

    def _serve(self):
        data, addr = self.sock.recvfrom(4096)
        self.registration = data
        self.robot = addr
        self.sock.sendto(self.reply, addr)

    @property
    def host(self):
        return "127.0.0.1:%d" % self.sock.getsockname()[1]

    def send(self, data):
        self.sock.sendto(data, self.robot)

    def recv(self):
        return self.sock.recvfrom(4096)[0]


@contextmanager
def simulator(reply=OK_REPLY):
    sim = FakeSimulator(reply)
    try:
        yield sim
    finally:
        sim.thread.join(5)
        sim.sock.close()


@pytest.fixture(autouse=True)
def _cleanup():
    api.close_robot()
    yield
    api.close_robot()


def test_link_without_init_raises():
    with pytest.raises(RuntimeError):
        api.link()


def test_read_sensors_without_init_raises():
    with pytest.raises(RuntimeError):
        api.read_sensors()


def test_init_robot_registers_and_reads_parameters():
    with simulator() as sim:
        rob = api.init_robot("rat", 1, sim.host)
        sim.thread.join(5)
        assert api.link() is rob
        assert sim.registration == register_message("rat", 1).encode() + b"\0"
        assert rob.sim_param.cycle_time == 50
        assert rob.sim_param.sim_time_final == 2000
        assert rob.n_beacons == 1


def test_init_robot_with_ir_angles():
    angles = [0.0, 60.0, -60.0, 180.0]
    with simulator() as sim:
        api.init_robot("rat", 2, sim.host, ir_sensor_angles=angles)
        sim.thread.join(5)
        assert sim.registration == register_message("rat", 2, angles).encode() + b"\0"


def test_double_init_raises_and_close_allows_reinit():
    with simulator() as sim:
        api.init_robot("rat", 1, sim.host)
        with pytest.raises(RuntimeError):
            api.init_robot("rat", 1, sim.host)
    api.close_robot()
    with pytest.raises(RuntimeError):
        api.link()
    with simulator() as sim:
        rob = api.init_robot("rat", 1, sim.host)
        assert api.link() is rob


def test_refused_registration_leaves_no_link():
    with simulator(REFUSED_REPLY) as sim:
        with pytest.raises(LinkError):
            api.init_robot("rat", 1, sim.host)
    with pytest.raises(RuntimeError):
        api.link()


def test_read_sensors_stores_measures():
    with simulator() as sim:
        api.init_robot("rat", 1, sim.host)
        sim.thread.join(5)
        message = (
            b'<Measures Time="7"><Sensors Compass="45.5" Ground="-1">'
            b'<IRSensor Id="0" Value="1.25"/></Sensors></Measures>\0'
        )
        sim.send(message)
        size = api.read_sensors()
        assert size == len(message)
        rob = api.link()
        assert rob.time == 7
        assert rob.measures.compass == 45.5
        assert rob.ir_sensor_ready(api.CENTER) is True
        assert rob.ir_sensor(api.CENTER) == 1.25
        assert rob.ir_sensor_ready(api.LEFT) is False


def test_actions_go_to_simulator():
    with simulator() as sim:
        api.init_robot("rat", 1, sim.host)
        sim.thread.join(5)
        api.link().drive_motors(0.1, -0.1)
        assert sim.recv() == drive_motors_message(0.1, -0.1).encode() + b"\0"


def test_read_map_layout(tmp_path):
    lab = tmp_path / "lab.xml"
    lab.write_text(
        '<Lab Name="test">'
        '<Row Pos="0" Pattern="  |"/>'
        '<Row Pos="1" Pattern="---"/>'
        "</Lab>"
    )
    rows = api.read_map(lab)
    assert len(rows) == api.CELLROWS * 2 - 1
    assert all(len(row) == api.CELLCOLS * 2 - 1 for row in rows)
    assert rows[0][1] == "|"
    assert rows[1][0] == "-"
    assert set("".join(rows[2:])) == {" "}


def test_read_map_empty_lab_is_blank(tmp_path):
    lab = tmp_path / "lab.xml"
    lab.write_text('<Lab Name="empty"></Lab>')
    rows = api.read_map(str(lab))
    assert set("".join(rows)) == {" "}


def test_read_map_malformed_raises(tmp_path):
    lab = tmp_path / "lab.xml"
    lab.write_text("<Lab><Row")
    with pytest.raises(ParseError):
        api.read_map(lab)


def test_read_map_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        api.read_map(tmp_path / "missing.xml")