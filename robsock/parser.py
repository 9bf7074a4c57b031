"""Parser for the XML messages exchanged with the simulator and for lab maps."""

from __future__ import annotations

from typing import Mapping, Optional, Union
from xml.parsers import expat

from .state import MAX_MESSAGE_SENDERS, NUM_IR_SENSORS, BeaconMeasure, Measures, SimParam

CELLROWS = 7
CELLCOLS = 14
MAP_ROWS = CELLROWS * 2 - 1
MAP_COLS = CELLCOLS * 2 - 1

_UINT_MAX = 2**32 - 1


class ParseError(ValueError):
    """Raised when a message cannot be parsed or is rejected by the parser."""


def _to_int(text: str) -> int:
    try:
        return int(text.strip(), 10)
    except ValueError:
        return 0


def _to_uint(text: str) -> int:
    value = _to_int(text)
    return value if 0 <= value <= _UINT_MAX else 0


def _to_float(text: str) -> float:
    try:
        return float(text.strip())
    except ValueError:
        return 0.0


def _read_bool(attrs: Mapping[str, str], name: str, true_word: str, false_word: str) -> Optional[bool]:
    value = attrs.get(name)
    if value == true_word:
        return True
    if value == false_word:
        return False
    return None


def _on_off(attrs: Mapping[str, str], name: str) -> Optional[bool]:
    return _read_bool(attrs, name, "On", "Off")


def _yes_no(attrs: Mapping[str, str], name: str) -> Optional[bool]:
    return _read_bool(attrs, name, "Yes", "No")


class StructureParser:
    """Collects simulation parameters, measures and a lab map from XML text.

    After :meth:`parse` the results are in ``sim_param``, ``measures`` and
    ``map``. Values read before a failure are kept even when parsing raises.
    """

    def __init__(self, n_beacons: int = 0) -> None:
        self.sim_param = SimParam()
        self.measures = Measures(n_beacons)
        self.map: list[list[str]] = [[" "] * MAP_COLS for _ in range(MAP_ROWS)]
        self._active_tag = ""
        self._hear_from = 0

    @property
    def map_rows(self) -> list[str]:
        """The lab map as one string per row."""
        return ["".join(row) for row in self.map]

    def parse(self, xml: Union[str, bytes]) -> "StructureParser":
        """Parse one XML document; raise ParseError if it is malformed or rejected."""
        if isinstance(xml, (bytes, bytearray)):
            text = bytes(xml).split(b"\0", 1)[0].decode("latin-1")
        else:
            text = xml.split("\0", 1)[0]

        parser = expat.ParserCreate(encoding="UTF-8")
        parser.buffer_text = True
        parser.StartElementHandler = self._start_element
        parser.EndElementHandler = self._end_element
        parser.CharacterDataHandler = self._characters
        try:
            parser.Parse(text, True)
        except expat.ExpatError as exc:
            raise ParseError(f"malformed XML: {exc}") from exc
        return self

    # Element handlers

    def _start_element(self, tag: str, attrs: dict[str, str]) -> None:
        self._active_tag = tag
        handler = self._START_HANDLERS.get(tag)
        if handler is not None:
            handler(self, attrs)

    def _end_element(self, tag: str) -> None:
        self._active_tag = ""

    def _characters(self, data: str) -> None:
        if self._active_tag == "Message" and 1 <= self._hear_from <= MAX_MESSAGE_SENDERS:
            self.measures.hear_message[self._hear_from - 1] += data

    def _reply(self, attrs: dict[str, str]) -> None:
        status = attrs.get("Status")
        if status == "Ok":
            return
        if status == "Refused":
            raise ParseError("registration refused by simulator")
        raise ParseError(f"unexpected reply status: {status!r}")

    def _parameters(self, attrs: dict[str, str]) -> None:
        param = self.sim_param
        floats = {
            "CompassNoise": "compass_noise",
            "BeaconNoise": "beacon_noise",
            "ObstacleNoise": "obstacle_noise",
            "MotorsNoise": "motors_noise",
            "BeaconAperture": "beacon_aperture",
        }
        uints = {
            "SimTime": "sim_time_final",
            "KeyTime": "key_time",
            "CycleTime": "cycle_time",
            "NBeacons": "n_beacons",
            "RequestsPerCycle": "n_req_per_cycle",
            "ObstacleLatency": "obstacle_latency",
            "BeaconLatency": "beacon_latency",
            "GroundLatency": "ground_latency",
            "CompassLatency": "compass_latency",
            "CollisionLatency": "collision_latency",
        }
        flags = {
            "ObstacleRequestable": "obstacle_requestable",
            "BeaconRequestable": "beacon_requestable",
            "GroundRequestable": "ground_requestable",
            "CompassRequestable": "compass_requestable",
            "CollisionRequestable": "collision_requestable",
        }
        for name, attr in floats.items():
            if name in attrs:
                setattr(param, attr, _to_float(attrs[name]))
        for name, attr in uints.items():
            if name in attrs:
                setattr(param, attr, _to_uint(attrs[name]))
        for name, attr in flags.items():
            value = _on_off(attrs, name)
            if value is not None:
                setattr(param, attr, value)

    def _measures_tag(self, attrs: dict[str, str]) -> None:
        if "Time" in attrs:
            self.measures.time = _to_uint(attrs["Time"])

    def _sensors(self, attrs: dict[str, str]) -> None:
        m = self.measures
        m.compass_ready = "Compass" in attrs
        if m.compass_ready:
            m.compass = _to_float(attrs["Compass"])
        collision = _yes_no(attrs, "Collision")
        m.collision_ready = collision is not None
        if collision is not None:
            m.collision = collision
        m.ground_ready = "Ground" in attrs
        if m.ground_ready:
            m.ground = _to_int(attrs["Ground"])

    def _ir_sensor(self, attrs: dict[str, str]) -> None:
        if "Id" not in attrs:
            raise ParseError("IRSensor without Id")
        sensor_id = _to_uint(attrs["Id"])
        if sensor_id >= NUM_IR_SENSORS:
            raise ParseError(f"IRSensor Id out of range: {sensor_id}")
        ready = "Value" in attrs
        self.measures.ir_sensor_ready[sensor_id] = ready
        if ready:
            self.measures.ir_sensor[sensor_id] = _to_float(attrs["Value"])

    def _beacon_sensor(self, attrs: dict[str, str]) -> None:
        if "Id" not in attrs:
            raise ParseError("BeaconSensor without Id")
        beacon_id = _to_uint(attrs["Id"])
        m = self.measures
        if beacon_id >= len(m.beacon_ready):
            return
        m.beacon_ready[beacon_id] = True
        value = attrs.get("Value")
        if value is None:
            raise ParseError("BeaconSensor without Value")
        if value == "NotVisible":
            m.beacon[beacon_id] = BeaconMeasure(visible=False, direction=0.0)
        else:
            m.beacon[beacon_id] = BeaconMeasure(visible=True, direction=_to_float(value))

    def _gps(self, attrs: dict[str, str]) -> None:
        m = self.measures
        m.gps_ready = "X" in attrs
        if m.gps_ready:
            m.x = _to_float(attrs["X"])
        if "Y" in attrs:
            m.y = _to_float(attrs["Y"])
        m.gps_dir_ready = "Dir" in attrs
        if m.gps_dir_ready:
            m.dir = _to_float(attrs["Dir"])

    def _leds(self, attrs: dict[str, str]) -> None:
        for name, attr in (("EndLed", "end_led"), ("ReturningLed", "returning_led"),
                           ("VisitingLed", "visiting_led")):
            value = _on_off(attrs, name)
            if value is not None:
                setattr(self.measures, attr, value)

    def _buttons(self, attrs: dict[str, str]) -> None:
        for name, attr in (("Start", "start"), ("Stop", "stop")):
            value = _on_off(attrs, name)
            if value is not None:
                setattr(self.measures, attr, value)

    def _score(self, attrs: dict[str, str]) -> None:
        m = self.measures
        for name, attr in (("Score", "score"), ("ArrivalTime", "arrival_time"),
                           ("ReturningTime", "returning_time"), ("Collisions", "collisions")):
            ready = name in attrs
            setattr(m, f"{attr}_ready", ready)
            if ready:
                setattr(m, attr, _to_uint(attrs[name]))

    def _message(self, attrs: dict[str, str]) -> None:
        if "From" in attrs:
            self._hear_from = _to_uint(attrs["From"])

    def _row(self, attrs: dict[str, str]) -> None:
        if "Pos" not in attrs:
            return
        row = _to_int(attrs["Pos"])
        if not 0 <= row < MAP_ROWS:
            return
        cells = self.map[row]
        for col, char in enumerate(attrs.get("Pattern", "")):
            if row % 2 == 0:
                # even rows hold only vertical walls
                if char == "|":
                    index = (col + 1) // 3 * 2 - 1
                    if 0 <= index < MAP_COLS:
                        cells[index] = "|"
            elif col % 3 == 0 and char == "-":
                # odd rows hold only horizontal walls
                index = col // 3 * 2
                if index < MAP_COLS:
                    cells[index] = "-"

    _START_HANDLERS = {
        "Reply": _reply,
        "Parameters": _parameters,
        "Measures": _measures_tag,
        "Sensors": _sensors,
        "IRSensor": _ir_sensor,
        "BeaconSensor": _beacon_sensor,
        "GPS": _gps,
        "Leds": _leds,
        "Buttons": _buttons,
        "Score": _score,
        "Message": _message,
        "Row": _row,
    }