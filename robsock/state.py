"""Simulation parameters and sensor measures exchanged with the simulator."""

from __future__ import annotations

import math
from dataclasses import InitVar, dataclass, field

NUM_IR_SENSORS = 4
MAX_MESSAGE_SENDERS = 10


@dataclass
class BeaconMeasure:
    """A beacon reading: whether it is visible and its direction in degrees."""

    visible: bool = False
    direction: float = 0.0


@dataclass
class SimParam:
    """Simulation parameters sent by the simulator after registration."""

    obstacle_noise: float = 0.0
    beacon_noise: float = 0.0
    motors_noise: float = 0.0
    compass_noise: float = 0.0

    sim_time_final: int = 1500
    key_time: int = 1500
    cycle_time: int = 80
    n_beacons: int = 0

    obstacle_latency: int = 1
    beacon_latency: int = 1
    ground_latency: int = 1
    compass_latency: int = 1
    collision_latency: int = 1

    obstacle_requestable: bool = False
    beacon_requestable: bool = False
    ground_requestable: bool = False
    compass_requestable: bool = False
    collision_requestable: bool = False

    beacon_aperture: float = math.pi / 3

    n_req_per_cycle: int = 2


def _false_ir() -> list[bool]:
    return [False] * NUM_IR_SENSORS


def _zero_ir() -> list[float]:
    return [0.0] * NUM_IR_SENSORS


def _empty_messages() -> list[str]:
    return [""] * MAX_MESSAGE_SENDERS


@dataclass
class Measures:
    """Sensor values and robot state reported by the simulator in one cycle."""

    n_beacons: InitVar[int] = 0

    time: int = 0

    compass_ready: bool = False
    compass: float = 0.0

    ir_sensor_ready: list[bool] = field(default_factory=_false_ir)
    ir_sensor: list[float] = field(default_factory=_zero_ir)

    beacon_ready: list[bool] = field(init=False)
    beacon: list[BeaconMeasure] = field(init=False)

    ground_ready: bool = False
    ground: int = -1

    collision_ready: bool = False
    collision: bool = False

    start: bool = False
    stop: bool = False
    end_led: bool = False
    returning_led: bool = False
    visiting_led: bool = False

    x: float = 0.0
    y: float = 0.0
    dir: float = 0.0

    score_ready: bool = False
    score: int = 0
    arrival_time_ready: bool = False
    arrival_time: int = 0
    returning_time_ready: bool = False
    returning_time: int = 0
    collisions_ready: bool = False
    collisions: int = 0

    gps_ready: bool = False
    gps_dir_ready: bool = False

    hear_message: list[str] = field(default_factory=_empty_messages)

    def __post_init__(self, n_beacons: int) -> None:
        if n_beacons < 0:
            raise ValueError(f"number of beacons must not be negative: {n_beacons}")
        self.beacon_ready = [False] * n_beacons
        self.beacon = [BeaconMeasure() for _ in range(n_beacons)]