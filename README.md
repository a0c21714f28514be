# rntpsim

Building blocks for simulating a reliable transport protocol over wireless
multihop named-data networks: the consumer and sensor applications, a small
discrete-event scheduler that drives them, the link-protocol TLV encodings they
use, the experiment settings and the result logs.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `rntpsim.tlv`: link-protocol TLV-TYPE numbers (`LpType`), packet tag
  identifiers (`TagId`), field declarations (`FieldDecl`, `FieldLocation`,
  `field_for_type`, `is_header_field`) and TLV coding helpers
  (`encode_var_number`, `decode_var_number`, `encode_block`, `decode_block`,
  `parse_blocks`). Malformed input raises `TlvError`, a `ValueError`;
  `field_for_type` raises `KeyError` for a type with no declared field.
- `rntpsim.snr`: `SnrTag`, the SNR and RSSI of a received frame packed as two
  raw doubles (`serialize` / `deserialize`), and `LltcSnrTag`, the same pair
  carried as a nested `LltcSnr` TLV element (`wire_encode` / `wire_decode`).
- `rntpsim.config`: `RntpConfig`, a dataclass holding every experiment setting
  with its default. `RntpConfig.from_file` reads `NAME = value` lines (for
  example `N_NODES = 36`) and sets the matching lower-case attribute
  (`n_nodes`); unknown names and other lines are ignored, and numbers are read
  leniently (a value with no leading number gives 0). `frequency()` gives the
  carrier frequency in hertz and raises `ValueError` for an unknown standard;
  `phy_standard()` gives a `WifiStandard`. `STANDARD_MODES` lists the data
  modes of each standard.
- `rntpsim.logs`: `LogSet`, the result logs named by `LogName`, kept as files
  in one directory. `open()` creates the directory and truncates every log,
  `stream(name)` gives an open file, `close()` closes them all and `clean()`
  removes everything named `log*` in the directory. It works as a context
  manager.
- `rntpsim.events`: `Scheduler`, which runs callbacks in order of simulated
  time (ties in scheduling order), with `schedule`, `cancel` and
  `run(until)`; `Event.cancel` and `Event.is_running`.
- `rntpsim.consumer`: `GenericConsumer`, which sends one Interest on `start()`,
  passes each arriving capsule (`on_data(name, data)`) through a
  `ResequenceQueue` and can broadcast an end of transport with
  `terminate_transport()`. The queue releases capsules in data-id order and
  gives up on a gap once the oldest waiting capsule has waited `max_wait_time`.
  Name helpers: `parse_capsule_name`, `interest_broadcast_name`,
  `interest_broadcast_content`, `format_capsule_log`.
- `rntpsim.sensor`: `SensorApp`, which on `on_interest(consumer_tag)` starts
  sending capsules at a fixed frequency, with a jitter of up to a microsecond,
  until its stop time; helpers `capsule_name`, `pack_consumer_tag`,
  `unpack_consumer_tag`.

## Example

```python
from rntpsim.config import RntpConfig
from rntpsim.consumer import GenericConsumer
from rntpsim.events import Scheduler
from rntpsim.sensor import SensorApp

config = RntpConfig.from_file("experiment.conf")
print(config.n_nodes, config.frequency())

scheduler = Scheduler()
consumer = GenericConsumer(scheduler, "/sensor/a", node_id=0,
                           max_wait_time=config.consumer_max_wait_time_in_secs)
consumer.start()

def deliver(name, content, consumer_tag, path_id):
    consumer.on_data(name)

sensor = SensorApp(scheduler, "/sensor/a", node_id=63,
                   freq=config.producer_freq, send_data=deliver, stop_time=2.0)
sensor.on_interest(None)
scheduler.run(until=3.0)
print(consumer.n_received, [info.data_id for info in consumer.resequenced][:5])
```

## What it does not do

There is no network stack here: no forwarder, no radio or channel model, no
routing and no topology setup. Applications hand their packets to callbacks
you supply (`send_interest`, `send_data`) and receive packets only when you
call `on_data` or `on_interest`. There is no command-line program; a run is
assembled in Python as above.