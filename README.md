# robsock

A small Python client for writing robot agents that connect to a maze-robot
simulator. An agent registers with the simulator over UDP and gets the
simulation parameters back. After that it reads a sensor report every cycle
and answers with motor, LED and message commands.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Quick start

```python
from robsock.roblink import RobLink

with RobLink("myrobot", 1, "localhost") as robot:
    while True:
        robot.read_sensors()
        if robot.measures.start:
            break
    while not robot.measures.stop:
        robot.read_sensors()
        if robot.ir_sensor_ready(0) and robot.ir_sensor(0) > 2.0:
            robot.drive_motors(-0.1, 0.1)
        else:
            robot.drive_motors(0.1, 0.1)
```

`RobLink(name, rob_id, host="localhost", ir_sensor_angles=None,
beacon_height=None)` opens a UDP socket, sends the registration message and
waits for the simulator's reply. After the reply, further messages go to the
address the reply came from. You can write the host as `host:port`. A port
given that way replaces the default simulator port, 6000.

### Robot variants

- `ir_sensor_angles`: exactly four angles in degrees, measured from the front
  of the robot. Use it to register with custom obstacle-sensor positions.
- `beacon_height`: registers a robot that also acts as a beacon.

You cannot give both. Passing both raises `ValueError`.

### Sensors and state

`RobLink.read_sensors()` waits for the next report and parses it into
`robot.measures`, a `robsock.state.Measures`. It returns the size of the report
in bytes. `Measures` holds:

- the simulation time
- compass, ground and collision values, each with a `*_ready` flag
- GPS position (`x`, `y`, `dir`) with `gps_ready` and `gps_dir_ready`
- button states (`start`, `stop`) and LED states (`end_led`, `returning_led`, `visiting_led`)
- score values with their ready flags
- messages heard from other robots

Indexed values are read with these methods:

- `ir_sensor_ready(id)`: returns `False` for an id out of range.
- `ir_sensor(id)`: raises `IndexError` for an id out of range.
- `beacon_ready(id)`: returns `False` for an id out of range.
- `beacon(id)`: returns a `BeaconMeasure` with `visible` and `direction`; raises `IndexError` for an id out of range.
- `new_message(sender)` and `message(sender)`: senders are numbered 1 to 10; any other number raises `IndexError`.

`robot.time` and `robot.n_beacons` are shortcuts. The simulation parameters
sent at registration are in `robot.sim_param`, a `robsock.state.SimParam`. It
holds the noise levels, times, latencies, requestable flags, beacon aperture
and requests per cycle. `robot.fileno()` gives the socket descriptor for use
with `select`.

### Requesting sensors

When the simulator makes sensors requestable, ask for them before the next
cycle:

```python
robot.request_sensors("Compass", "Ground", "IRSensor0", "Beacon0")
```

`request_ground()`, `request_compass()`, `request_beacon(id)` and
`request_obstacle(id)` each request a single sensor.

### Commands

These methods send commands to the simulator:

- `drive_motors(left, right)`
- `set_returning_led(on)`
- `set_visiting_led(on)`
- `say(msg)`
- `finish()`

`close()` closes the socket. Leaving the `with` block closes it too.

### Module-level interface

`robsock.api` keeps one process-wide link:

```python
from robsock import api

api.init_robot("myrobot", 1, "localhost")
api.read_sensors()
robot = api.link()
robot.drive_motors(0.05, 0.05)
api.close_robot()
```

Its functions behave as follows:

- `init_robot` raises `RuntimeError` if a robot is already registered.
- `link()` raises `RuntimeError` if no robot is registered.
- `close_robot()` closes the link, so that another robot can be registered.
- The sensor ids `CENTER`, `LEFT`, `RIGHT` and `OTHER1` are defined here.

`api.read_map(filename)` reads a lab file with `Row` elements and returns the
wall layout as a list of strings. The layout has `CELLROWS*2-1` = 13 rows of
`CELLCOLS*2-1` = 27 characters. `'|'` marks a vertical wall, `'-'` a horizontal
wall, and a blank a free place.

### Lower-level pieces

- `robsock.parser.StructureParser(n_beacons)` parses any simulator message or
  lab file with `parse(xml)`. The results are in `sim_param`, `measures`, `map`
  and `map_rows`.
- `robsock.netif.Port` is the UDP socket wrapper. It offers `init`,
  `send_info`, `recv_info`, `set_remote` and `close`, and works as a context
  manager.
- `robsock.netif.split_host` splits a `host:port` string.

### Message helpers

The functions in `robsock.roblink` build the protocol messages without sending
them. They are useful for testing or for custom transports:

- `register_message`
- `robot_beacon_register_message`
- `sensor_request_message`
- `drive_motors_message`
- `say_message`
- `led_message`
- `finish_message`

### Errors

- `robsock.roblink.LinkError`: the socket cannot be opened, a send or receive
  fails, or the simulator refuses the registration.
- `robsock.parser.ParseError`: raised by `StructureParser.parse` and
  `api.read_map` for malformed XML, a refused reply or bad sensor elements.
  `read_sensors` ignores parse errors and keeps whatever values were read
  before the error.

## What this package does not do

This is a client library only. It does not include:

- the simulator itself
- a viewer or any graphical display
- a log player
- a sample agent program
- a command-line tool

To drive a robot, you need a running simulator to connect to.