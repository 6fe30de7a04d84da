# nhpkit

Building blocks for services that sit around a network-hiding firewall
setup. The package holds an asynchronous logger that writes to several files,
wrappers around `iptables` and `ipset`, an expiring in-memory cache, small
crypto and encoding helpers, and some host utilities.

## Installation

```
pip install nhpkit
```

To run the test suite:

```
pip install "nhpkit[test]"
pytest
```

## Logging

`nhpkit.logger.Logger` hands each formatted line to a background writer
thread. Each writer thread writes its queued lines in batches. A logger owns
three writers:

- the general log, for warning, error, critical, info, stats, debug, trace
  and verbose lines;
- an `-evaluate` log, for evaluate lines, whose timestamps include
  microseconds;
- an `-audit` log, for audit and transaction lines.

Files are named `<name>-<YYYY-MM-DD>.log` inside the given directory. If
neither a directory nor a name is given, output goes to standard output.

```python
from nhpkit.logger import Logger, LogLevel, set_global_logger, info, close

log = Logger("NHP-Server", LogLevel.DEBUG, "logs", "server")
set_global_logger(log)          # closes the previous global logger

info("listening on port %d", 62206)
sub = log.new_sub_logger("NHP-Plugin", LogLevel.AUDIT)
sub.audit("user %s authenticated", "alice")

close()                         # flushes and stops the global logger
```

The levels, from least to most output, are `SILENT`, `ERROR`, `INFO`,
`AUDIT`, `DEBUG` and `TRACE`. A logger writes a message when the message's
level is at or below the logger's own level. Sub-loggers share their
parent's writers. `set_log_level` on a parent also sets the level of its
sub-loggers. `date_update_queue()` gives a queue that receives the previous
date each time the day changes.

## Firewall control

These helpers need root and the `iptables` and `ipset` binaries. If a binary
cannot be found, `FileNotFoundError` is raised.

```python
from nhpkit.iptables import new_iptables, new_ipset, IPType

tables = new_iptables()         # reads the current INPUT/FORWARD/OUTPUT policies
tables.accept_all_input()       # inserts ACCEPT rules for 0.0.0.0/0
tables.reset_all_input()        # deletes them again

ipset = new_ipset(wait=False)
ipset.add(IPType.IPV4, 1, 300, "10.0.0.5,tcp:443")
```

`IPSet.add` and `IPSet.run` raise `nhpkit.cmd.CommandError` in three cases:
the command fails, it writes to standard error, or `add` runs past its
two-second limit.

## Cache

```python
from nhpkit.cache import format_cache_key, cache_write_value, cache_read_value

key = format_cache_key("peer", "10.0.0.5")
cache_write_value(key, "allowed", 60)
cache_read_value(key)   # "allowed" until the 60 seconds are up, then ""
```

`ExpiringCache` is the class behind these functions. The cache holds at most
1 MiB. When it is full, the least recently used entries are evicted.
`set` raises `ValueError` for an entry larger than 1/1024 of the cache size.
A timeout of zero or less means the entry never expires.

## Other helpers

- `nhpkit.crypto`: AES-CBC string encryption with a built-in key
  (`aes_encrypt`, `aes_decrypt`), `hmac_sha256`, `md5`, `base64_encode`,
  and `generate_rsa_key`, which returns PKCS#1 DER keys as base64.
- `nhpkit.encoding`: `decode_string` and `encoding_string` for standard
  base64.
- `nhpkit.compress`: `compression` gzips a string. `decompression` takes
  base64-encoded gzip data and returns the text.
- `nhpkit.parser`: `parse_bool`, `parse_int`, `parse_uint64` and
  `parse_int64_to_int`. On invalid input they return 0 or `False`.
- `nhpkit.uuidgen`: `new_uuid` returns a version-4 UUID string.
  `rand_number` returns a number from 1000 to 9999.
- `nhpkit.waitpool.WaitPool`: an object pool whose `get` blocks while
  `max` objects are out.
- `nhpkit.runtime`:
  - `catch_panic` and `catch_panic_then_run` are context managers. They
    swallow an exception and log its traceback.
  - `get_random_uint32` returns a random 32-bit unsigned integer.
  - `get_current_date` returns today's date as `YYYYMMDD`.
- `nhpkit.cmd.run`: runs a command with a 10-second timeout and returns its
  output, with newlines removed, together with the command line.
- `nhpkit.files`: `read_whole_file` reads a file and `hash_file` computes
  its md5, sha1 or sha256 digest. `watch_file` calls a callback, debounced
  by 100 ms, each time a file is written or created.
- `nhpkit.host`: `get_local_outbound_address` and `get_mac_address`.
- `nhpkit.request`: `get` sends a GET request with a 10-second timeout.
  `request` sends a request with any method.
- `nhpkit.db`: `new_database` connects to MySQL through SQLAlchemy and keeps
  the engine for `get_db`. The user name and password may be passed
  encrypted with `aes_encrypt`. It uses the `mysql+pymysql` dialect, so
  install PyMySQL (`pip install pymysql`) before using this module.

## What this package does not do

nhpkit is a library only. It installs no commands and runs no agent,
server or access-controller daemon. It does not implement the knock
protocol, packet encryption or key exchange, and it does not load eBPF
programs or plugins. It supplies the logging, firewall, cache and utility
pieces that such programs are built from.