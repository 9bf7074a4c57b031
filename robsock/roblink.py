"""Connection of one robot agent to the simulator."""

from __future__ import annotations

from typing import Optional, Sequence

from .netif import Port
from .parser import ParseError, StructureParser
from .state import MAX_MESSAGE_SENDERS, NUM_IR_SENSORS, BeaconMeasure, Measures, SimParam

SIMULATOR_PORT = 6000
MSG_MAX_SIZE = 4096

_LEDS = ("ReturningLed", "VisitingLed")


class LinkError(RuntimeError):
    """Raised when the simulator cannot be reached or refuses the robot."""


def _g(value: float) -> str:
    return "%g" % value


def register_message(name: str, rob_id: int, ir_sensor_angles: Optional[Sequence[float]] = None) -> str:
    """Registration message for a robot, optionally with its IR sensor angles in degrees."""
    if ir_sensor_angles is None:
        return f'<Robot Name="{name}" Id="{rob_id:d}"></Robot>'
    angles = list(ir_sensor_angles)
    if len(angles) != NUM_IR_SENSORS:
        raise ValueError(f"expected {NUM_IR_SENSORS} IR sensor angles, got {len(angles)}")
    sensors = "".join(
        f'<IRSensor Id="{index}" Angle="{_g(angle)}"/>' for index, angle in enumerate(angles)
    )
    return f'<Robot Name="{name}" Id="{rob_id:d}">{sensors}</Robot>'


def robot_beacon_register_message(name: str, rob_id: int, height: float) -> str:
    """Registration message for a robot that also acts as a beacon."""
    return f'<RobotBeacon Name="{name}" Id="{rob_id:d}" Height="{_g(height)}"/>'


def sensor_request_message(*args: str) -> str:
    """Request message for the named sensors, e.g. ``"Compass"``, ``"IRSensor0"``."""
    requests = "".join(f'{sensor}="Yes" ' for sensor in args)
    return f"<Actions>\n\t<SensorRequests {requests}/>\n</Actions>"


def _single_request_message(sensor: str) -> str:
    return f'<Actions> <SensorRequests {sensor}="Yes" /> </Actions>\n'


def drive_motors_message(left: float, right: float) -> str:
    """Action message setting the power of both motors."""
    return f'<Actions LeftMotor="{_g(left)}" RightMotor="{_g(right)}"/>\n'


def say_message(msg: str) -> str:
    """Action message broadcasting ``msg`` to the other robots."""
    return f"<Actions><Say><![CDATA[{msg}]]></Say></Actions>\n"


def led_message(led: str, on: bool) -> str:
    """Action message stopping the motors and switching ``ReturningLed`` or ``VisitingLed``."""
    if led not in _LEDS:
        raise ValueError(f"unknown led: {led!r}")
    state = "On" if on else "Off"
    return f'<Actions LeftMotor="{_g(0.0)}" RightMotor="{_g(0.0)}" {led}="{state}"/>\n'


def finish_message() -> str:
    """Action message signalling the end of the round."""
    return '<Actions LeftMotor="0.0" RightMotor="0.0" EndLed="On"/>\n'


class RobLink:
    """A registered robot: sends actions and keeps the latest measures."""

    def __init__(
        self,
        name: str,
        rob_id: int,
        host: str = "localhost",
        ir_sensor_angles: Optional[Sequence[float]] = None,
        beacon_height: Optional[float] = None,
    ) -> None:
        if ir_sensor_angles is not None and beacon_height is not None:
            raise ValueError("a robot beacon cannot set IR sensor angles")
        if beacon_height is not None:
            registration = robot_beacon_register_message(name, rob_id, beacon_height)
        else:
            registration = register_message(name, rob_id, ir_sensor_angles)

        self.sim_param = SimParam()
        self.measures = Measures(0)
        self._port = Port(SIMULATOR_PORT, host, 0)
        try:
            self._port.init()
        except OSError as exc:
            raise LinkError(f"cannot open socket to {host!r}: {exc}") from exc
        try:
            self._send(registration)
            self._parse_server_reply()
        except BaseException:
            self._port.close()
            raise

    def _send(self, text: str) -> None:
        try:
            self._port.send_info(text.encode("latin-1", "replace") + b"\0")
        except OSError as exc:
            raise LinkError(f"send failed: {exc}") from exc

    def _recv(self) -> bytes:
        try:
            return self._port.recv_info(MSG_MAX_SIZE)
        except OSError as exc:
            raise LinkError(f"receive failed: {exc}") from exc

    def _parse_server_reply(self) -> None:
        data = self._recv()
        handler = StructureParser(self.sim_param.n_beacons)
        try:
            handler.parse(data)
        except ParseError as exc:
            raise LinkError(f"registration failed: {exc}") from exc
        self.sim_param = handler.sim_param
        if self._port.last_sender is not None:
            self._port.set_remote(self._port.last_sender)

    def fileno(self) -> int:
        """Socket descriptor, for use with ``select``."""
        return self._port.fileno()

    def read_sensors(self) -> int:
        """Wait for the next measures message and store it; return its size in bytes."""
        data = self._recv()
        handler = StructureParser(self.sim_param.n_beacons)
        try:
            handler.parse(data)
        except ParseError:
            # values read before the failure are still reported
            pass
        self.measures = handler.measures
        return len(data)

    # Actions

    def drive_motors(self, left: float, right: float) -> None:
        self._send(drive_motors_message(left, right))

    def say(self, msg: str) -> None:
        self._send(say_message(msg))

    def set_returning_led(self, on: bool) -> None:
        self._send(led_message("ReturningLed", on))

    def set_visiting_led(self, on: bool) -> None:
        self._send(led_message("VisitingLed", on))

    def finish(self) -> None:
        self._send(finish_message())

    # Sensor requests

    def request_ground(self) -> None:
        self._send(_single_request_message("Ground"))

    def request_compass(self) -> None:
        self._send(_single_request_message("Compass"))

    def request_beacon(self, beacon_id: int) -> None:
        self._send(_single_request_message(f"Beacon{beacon_id:d}"))

    def request_obstacle(self, sensor_id: int) -> None:
        self._send(_single_request_message(f"IRSensor{sensor_id:d}"))

    def request_sensors(self, *args: str) -> None:
        self._send(sensor_request_message(*args))

    # Measures

    @property
    def n_beacons(self) -> int:
        return self.sim_param.n_beacons

    @property
    def time(self) -> int:
        return self.measures.time

    def ir_sensor_ready(self, sensor_id: int) -> bool:
        if 0 <= sensor_id < NUM_IR_SENSORS:
            return self.measures.ir_sensor_ready[sensor_id]
        return False

    def ir_sensor(self, sensor_id: int) -> float:
        if not 0 <= sensor_id < NUM_IR_SENSORS:
            raise IndexError(f"IR sensor id out of range: {sensor_id}")
        return self.measures.ir_sensor[sensor_id]

    def beacon_ready(self, beacon_id: int) -> bool:
        if 0 <= beacon_id < self.n_beacons:
            return self.measures.beacon_ready[beacon_id]
        return False

    def beacon(self, beacon_id: int) -> BeaconMeasure:
        if not 0 <= beacon_id < self.n_beacons:
            raise IndexError(f"beacon id out of range: {beacon_id}")
        return self.measures.beacon[beacon_id]

    def _sender_index(self, sender: int) -> int:
        if not 1 <= sender <= MAX_MESSAGE_SENDERS:
            raise IndexError(f"sender id out of range: {sender}")
        return sender - 1

    def new_message(self, sender: int) -> bool:
        return self.measures.hear_message[self._sender_index(sender)] != ""

    def message(self, sender: int) -> str:
        return self.measures.hear_message[self._sender_index(sender)]

    # Lifetime

    def close(self) -> None:
        self._port.close()

    def __enter__(self) -> "RobLink":
        return self

    def __exit__(self, *args) -> None:
        self.close()