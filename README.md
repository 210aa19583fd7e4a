# zapcore

The low-level building blocks of a structured, leveled logger. The package is split into modules by concern.

| Module | What it holds |
| --- | --- |
| `zapcore.level` | `Level` and its constants `Level.DEBUG` through `Level.FATAL`. Also `parse_level`, `lowercase_color_string`, `capital_color_string` and the `LevelEnabler` protocol. |
| `zapcore.field` | `Field` and `FieldType`. A field is a typed key/value pair that adds itself to an encoder with `Field.add_to`. This module also has `add_fields`. |
| `zapcore.json_encoder` | `JSONEncoder`, which turns an entry plus its fields and accumulated context into one JSON line. |
| `zapcore.memory_encoder` | `MapObjectEncoder` and `SliceArrayEncoder`, which collect fields into plain dicts and lists. |
| `zapcore.encoder` | `EncoderConfig`, which names the output keys and chooses the level, time, duration, caller and name encoders. It also holds the encoders themselves, for example `iso8601_time_encoder`, `string_duration_encoder` and `short_caller_encoder`, along with `format_time_layout` and `format_duration`. |
| `zapcore.entry` | `Entry`, `EntryCaller` and `CheckedEntry`, plus `add_core` and `should`. |
| `zapcore.error` | `encode_error`, `MultiError`, `combine_errors` and `append_errors`. |
| `zapcore.marshaler` | The `ObjectMarshaler` and `ArrayMarshaler` protocols, and `ObjectMarshalerFunc` and `ArrayMarshalerFunc`, which wrap plain functions. |
| `zapcore.hook` | `register_hooks`, which runs callbacks for every logged entry. |
| `zapcore.increase_level` | `new_increase_level_core`, which raises the minimum level of a core. It raises `ValueError` if asked to lower the level. |
| `zapcore.sampler` | `new_sampler_with_options`, `new_sampler`, `sampler_hook` and `SamplingDecision`. A sampler logs the first N entries per level and message each tick, then every Mth. |

## Installing

```
pip install .
```

## Encoding an entry as JSON

```python
from datetime import datetime, timezone

from zapcore.encoder import EncoderConfig, iso8601_time_encoder, lowercase_level_encoder
from zapcore.entry import Entry
from zapcore.field import Field, FieldType
from zapcore.json_encoder import JSONEncoder
from zapcore.level import Level

cfg = EncoderConfig(
    message_key="msg",
    level_key="level",
    time_key="ts",
    encode_level=lowercase_level_encoder,
    encode_time=iso8601_time_encoder,
)
enc = JSONEncoder(cfg)
line = enc.encode_entry(
    Entry(level=Level.INFO, time=datetime.now(timezone.utc), message="started"),
    [Field(key="port", type=FieldType.STRING, string="8080")],
)
print(line, end="")
```

`encode_entry` returns a string, which ends with the configured `line_ending`. If no line ending is configured, it ends with `"\n"`.

Fields are added to the encoder's context by calling `add_*` on it directly. Every entry encoded afterwards includes that context. `clone()` gives an independent copy.

## Building a configuration from a dict

`EncoderConfig.from_dict` takes camelCase keys, as found in a decoded YAML or JSON file:

```python
cfg = EncoderConfig.from_dict({
    "messageKey": "msg",
    "levelKey": "level",
    "levelEncoder": "capital",
    "timeEncoder": {"layout": "06/01/02 03:04pm"},
    "durationEncoder": "string",
})
```

How the keys are handled:

- Unknown keys and `None` values are ignored.
- Values of the wrong type raise `TypeError`.
- Unknown encoder names fall back to a default encoder.

## Levels

```python
from zapcore.level import Level, parse_level

parse_level("WARN") == Level.WARN       # True; parsing ignores case, "" means info
Level.WARN.enabled(Level.ERROR)         # True
Level.ERROR.capital_string()            # "ERROR"
```

`parse_level` raises `ValueError` for text it does not recognise.

## Cores

The wrappers in `hook`, `increase_level` and `sampler` each wrap a core that you supply. A core is any object with these methods:

- `enabled(lvl)`
- `check(ent, ce)`
- `write(ent, fields)`
- `with_fields(fields)`
- `sync()`

Inside `check`, a core that wants to log an entry returns `add_core(ce, ent, self)`:

```python
from datetime import timedelta

from zapcore.entry import Entry, add_core
from zapcore.hook import register_hooks
from zapcore.level import Level
from zapcore.sampler import new_sampler_with_options

class ListCore:
    def __init__(self):
        self.entries = []
    def enabled(self, lvl):
        return lvl >= Level.INFO
    def with_fields(self, fields):
        return self
    def check(self, ent, ce):
        return add_core(ce, ent, self) if self.enabled(ent.level) else ce
    def write(self, ent, fields):
        self.entries.append(ent)
    def sync(self):
        pass

seen = []
core = ListCore()
logged = new_sampler_with_options(register_hooks(core, seen.append), timedelta(minutes=1), 2, 3)
for _ in range(9):
    ce = logged.check(Entry(level=Level.INFO, message="tick"), None)
    if ce is not None:
        ce.write()
len(core.entries)   # 4: the 1st, 2nd, 5th and 8th
```

What `CheckedEntry.write` does after writing depends on its action:

| Action | Result |
| --- | --- |
| `WRITE_THEN_PANIC` | raises `PanicError` |
| `WRITE_THEN_FATAL` | raises `SystemExit(1)` |
| `WRITE_THEN_GOEXIT` | raises `ExitThread` |

If a core fails while writing, the failure is reported to `error_output` rather than raised.

## What this package does not do

This package provides only the core layer. It has:

- no logger front end with `info()`/`error()`-style methods;
- no console (plain-text) encoder;
- no ready-made core that writes to files or streams;
- no command-line tool.

To get log output, you supply the core and the output destination yourself.

## Running the tests

```
pip install .[test]
pytest
```