"""UDP port used to talk to the simulator."""

from __future__ import annotations

import re
import socket
from typing import Optional

HOST_MAX_LENGTH = 255

_HOST_PORT = re.compile(r"([^:]{1,2047}):\s*([+-]?\d+)")


def split_host(remote_host: str, default_port: int) -> tuple[str, int]:
    """Split ``host:port``; a port given in the host overrides ``default_port``."""
    match = _HOST_PORT.match(remote_host)
    if match:
        host, port = match.group(1), int(match.group(2))
    else:
        host, port = remote_host, default_port
    return host[:HOST_MAX_LENGTH], port


class Port:
    """A UDP socket bound locally and optionally aimed at a remote address."""

    def __init__(self, remote_port: int = 0, remote_host: str = "", local_port: int = 0) -> None:
        self.host, self.remote_port = split_host(remote_host, remote_port)
        self.local_port = local_port
        self.last_sender: Optional[tuple[str, int]] = None
        self._remote: Optional[tuple[str, int]] = None
        self._sock: Optional[socket.socket] = None

    def init(self, blocking: bool = True) -> "Port":
        """Open and bind the socket, resolving the remote host if one is set."""
        self.close()
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind(("", self.local_port))
            if self.host:
                address = socket.gethostbyname(self.host)
                self.host = address
                self._remote = (address, self.remote_port)
            sock.setblocking(blocking)
        except OSError:
            sock.close()
            raise
        self._sock = sock
        return self

    def _socket(self) -> socket.socket:
        if self._sock is None:
            raise OSError("port is not open")
        return self._sock

    @property
    def remote(self) -> Optional[tuple[str, int]]:
        return self._remote

    @property
    def local_address(self) -> tuple[str, int]:
        return self._socket().getsockname()

    def fileno(self) -> int:
        return self._socket().fileno()

    def send_info(self, data: bytes) -> None:
        """Send one datagram to the remote address."""
        sock = self._socket()
        if self._remote is None:
            raise OSError("no remote address set")
        payload = bytes(data)
        sent = sock.sendto(payload, self._remote)
        if sent != len(payload):
            raise OSError(f"short send: {sent} of {len(payload)} bytes")

    def recv_info(self, bufsize: int = 4096) -> bytes:
        """Receive one datagram and remember who sent it."""
        data, sender = self._socket().recvfrom(bufsize)
        self.last_sender = sender
        return data

    def set_remote(self, address: tuple[str, int]) -> None:
        self._remote = (address[0], address[1])

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> "Port":
        if self._sock is None:
            self.init()
        return self

    def __exit__(self, *args) -> None:
        self.close()