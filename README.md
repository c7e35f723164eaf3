# benchutil

Small building blocks for writing benchmarks: a monotonic tick counter,
summary statistics over repeated runs, human-readable number formatting,
C-style number parsing and a description of the machine the benchmark
runs on.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

### `benchutil.statistics`

Aggregates over a sequence of measurements:

```python
from benchutil.statistics import mean, median, stddev, cv

samples = [1.0, 2.0, 3.0, 4.0]
mean(samples)    # arithmetic mean, 0.0 for an empty sequence
median(samples)  # falls back to the mean for fewer than three samples
stddev(samples)  # sample standard deviation, 0.0 for fewer than two samples
cv(samples)      # stddev / mean, 0.0 for fewer than two samples
```

### `benchutil.strings`

```python
from benchutil.strings import human_readable_number, str_split, parse_int

human_readable_number(2048)   # "2k"
str_split("a,b,,c", ",")      # ["a", "b", "", "c"]
str_split("", ",")            # []
parse_int("  42xyz")          # 42, the longest integer prefix
```

`human_readable_number(n, one_k=1024.0)` keeps figures up to 1.1 of the
next unit in the unit below. `human_readable_int(n)` rounds down to the
nearest prefix. `str_format(fmt, *args)` formats with a printf-style
string (length modifiers such as `l` or `ll` are accepted and ignored),
and `str_cat(*args)` joins the text of its arguments, writing floats as
`%g` and booleans as `1`/`0`.

`parse_unsigned(text, base=10)`, `parse_int(text, base=10)` and
`parse_float(text)` read the longest numeric prefix of `text`, skipping
leading whitespace. They raise `ValueError` when no number is found and
`OverflowError` when the value is out of range (64 bits for
`parse_unsigned`, where a leading minus wraps around; 32 bits for
`parse_int`; overflow or underflow for `parse_float`).

### `benchutil.cycleclock`

```python
from benchutil import cycleclock

start = cycleclock.now()
...
elapsed_ns = cycleclock.now() - start
```

`now()` returns nanosecond ticks of a high-resolution monotonic clock;
only differences between readings are meaningful.

### `benchutil.sysinfo`

```python
from benchutil.sysinfo import CPUInfo, SystemInfo

info = CPUInfo.get()
info.num_cpus, info.scaling, info.cycles_per_second
for cache in info.caches:
    print(cache.level, cache.type, cache.size, cache.num_sharing)
info.load_avg

SystemInfo.get().name   # host name
```

`CPUInfo.get()` and `SystemInfo.get()` gather their data once per process
and return the same frozen object after that. `scaling` is a `Scaling`
member (`UNKNOWN`, `ENABLED` or `DISABLED`); `caches` is a tuple of
`CacheInfo` and `load_avg` a tuple of up to three floats.

The functions behind them can also be called directly: `get_num_cpus()`,
`cpu_scaling(num_cpus)`, `get_cpu_cycles_per_second(scaling)`,
`get_cache_sizes()`, `get_system_name()`, `get_load_avg()` and
`count_set_bits_in_cpu_map(value)`.

On Linux the data comes from `/proc/cpuinfo` and `/sys/devices/system/cpu`.
`get_num_cpus()` returns -1 when `/proc/cpuinfo` cannot be read, and
`get_cache_sizes()` raises `SysInfoError` when a cache description is
present but malformed. When no clock rate is reported,
`get_cpu_cycles_per_second()` estimates one by sleeping for one second,
so the first `CPUInfo.get()` can take that long.

## What it does not do

The package does not measure CPU time: there is no per-process or
per-thread CPU usage reading and no local timestamp formatting. It also
has no benchmark runner, registration or reporting; it provides only the
helpers described above.