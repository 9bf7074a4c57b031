"""Process-wide robot connection for simple agent programs.

An agent registers one robot with :func:`init_robot` and then reaches the
connection through :func:`link` to read measures and send actions.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Union

from .parser import CELLCOLS, CELLROWS, StructureParser
from .roblink import RobLink

CENTER = 0
LEFT = 1
RIGHT = 2
OTHER1 = 3

__all__ = [
    "CELLCOLS",
    "CELLROWS",
    "CENTER",
    "LEFT",
    "OTHER1",
    "RIGHT",
    "close_robot",
    "init_robot",
    "link",
    "read_map",
    "read_sensors",
]

_link: Optional[RobLink] = None


def init_robot(
    name: str,
    rob_id: int,
    host: str = "localhost",
    ir_sensor_angles: Optional[Sequence[float]] = None,
    beacon_height: Optional[float] = None,
) -> RobLink:
    """Register the robot with the simulator at ``host`` and keep the connection.

    ``host`` may be ``host:port``. Give ``ir_sensor_angles`` (degrees) to place
    the IR sensors, or ``beacon_height`` to register a robot that is a beacon.
    Raises RuntimeError if a robot is already registered and LinkError if the
    simulator cannot be reached or refuses the robot.
    """
    global _link
    if _link is not None:
        raise RuntimeError("robot already initialised")
    _link = RobLink(
        name,
        rob_id,
        host,
        ir_sensor_angles=ir_sensor_angles,
        beacon_height=beacon_height,
    )
    return _link


def link() -> RobLink:
    """The connection opened by :func:`init_robot`."""
    if _link is None:
        raise RuntimeError("robot not initialised")
    return _link


def close_robot() -> None:
    """Close the connection, if any, so that another robot can be registered."""
    global _link
    if _link is not None:
        current, _link = _link, None
        current.close()


def read_sensors() -> int:
    """Wait for the next measures from the simulator; return the message size."""
    return link().read_sensors()


def read_map(filename: Union[str, Path]) -> list[str]:
    """Read a lab map file and return its wall layout, one string per row.

    The layout has ``CELLROWS*2-1`` rows of ``CELLCOLS*2-1`` characters:
    ``'|'`` marks a vertical wall, ``'-'`` a horizontal one, blanks are free.
    """
    data = Path(filename).read_bytes()
    handler = StructureParser(1)
    handler.parse(data)
    return handler.map_rows