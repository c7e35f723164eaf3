"""Facts about the host: CPU count, frequency scaling, clock rate, caches, load."""

from __future__ import annotations

import enum
import functools
import itertools
import os
import platform
import re
import socket
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from benchutil import cycleclock
from benchutil.strings import parse_float, parse_int, parse_unsigned

_SYSFS_CPU_ROOT = Path("/sys/devices/system/cpu")
_CPU0_DIR = _SYSFS_CPU_ROOT / "cpu0"
_CACHE_DIR = _CPU0_DIR / "cache"
_PROC_CPUINFO = Path("/proc/cpuinfo")

_MASK_BITS = 64
_ESTIMATE_SECONDS = 1.0

_WORD = re.compile(r"\s*(\S+)")
_LONG = re.compile(r"\s*([+-]?\d+)")


class SysInfoError(RuntimeError):
    """Raised when system information is present but malformed."""


class Scaling(enum.Enum):
    """Whether CPU frequency scaling is in effect."""

    UNKNOWN = enum.auto()
    ENABLED = enum.auto()
    DISABLED = enum.auto()


@dataclass(frozen=True)
class CacheInfo:
    """One CPU cache as seen from CPU 0."""

    type: str = ""
    level: int = 0
    size: int = 0
    num_sharing: int = 0


def _is_linux() -> bool:
    return sys.platform.startswith(("linux", "cygwin"))


def _is_windows() -> bool:
    return sys.platform == "win32"


def _read_text(path: Path) -> str | None:
    try:
        return Path(path).read_text()
    except (OSError, UnicodeDecodeError):
        return None


def _read_word(path: Path) -> str | None:
    """Read the first whitespace-delimited word; None unless more text follows."""
    text = _read_text(path)
    if text is None:
        return None
    match = _WORD.match(text)
    if match is None or match.end() >= len(text):
        return None
    return match.group(1)


def _read_long(path: Path) -> int | None:
    """Read a leading integer; None unless more text follows it."""
    text = _read_text(path)
    if text is None:
        return None
    match = _LONG.match(text)
    if match is None or match.end() >= len(text):
        return None
    return int(match.group(1))


def count_set_bits_in_cpu_map(value: str) -> int:
    """Count the CPUs named by a comma-separated hexadecimal CPU mask."""
    *parts, last = value.split(",")
    total = sum(_count_bits(part) for part in parts)
    if last:
        total += _count_bits(last)
    return total


def _count_bits(part: str) -> int:
    mask = parse_unsigned("0x" + part, 16) & ((1 << _MASK_BITS) - 1)
    return bin(mask).count("1")


def _scaling_from_sysfs(num_cpus: int, cpu_root: Path) -> Scaling:
    for cpu in range(num_cpus):
        governor = _read_word(
            Path(cpu_root) / f"cpu{cpu}" / "cpufreq" / "scaling_governor"
        )
        if governor is not None and governor != "performance":
            return Scaling.ENABLED
    return Scaling.DISABLED


def cpu_scaling(num_cpus: int) -> Scaling:
    """Report whether any of the first ``num_cpus`` CPUs scales its frequency."""
    if num_cpus <= 0 or _is_windows():
        return Scaling.UNKNOWN
    return _scaling_from_sysfs(num_cpus, _SYSFS_CPU_ROOT)


def _cache_sizes_from_dir(cache_dir: Path) -> list[CacheInfo]:
    caches: list[CacheInfo] = []
    for idx in itertools.count():
        entry = Path(cache_dir) / f"index{idx}"
        text = _read_text(entry / "size")
        if text is None:
            break
        match = _LONG.match(text)
        if match is None:
            raise SysInfoError(f"Failed while reading file '{entry}/size'")
        size = int(match.group(1))
        rest = text[match.end():]
        if rest:
            words = rest.split(maxsplit=1)
            if words:
                if words[0] != "K":
                    raise SysInfoError(
                        f"Invalid cache size format: Expected bytes {words[0]}"
                    )
                size *= 1024

        cache_type = _read_word(entry / "type")
        if cache_type is None:
            raise SysInfoError(f"Failed to read from file {entry}/type")
        level = _read_long(entry / "level")
        if level is None:
            raise SysInfoError(f"Failed to read from file {entry}/level")
        cpu_map = _read_word(entry / "shared_cpu_map")
        if cpu_map is None:
            raise SysInfoError(f"Failed to read from file {entry}/shared_cpu_map")

        caches.append(
            CacheInfo(
                type=cache_type,
                level=level,
                size=size,
                num_sharing=count_set_bits_in_cpu_map(cpu_map),
            )
        )
    return caches


def get_cache_sizes() -> list[CacheInfo]:
    """Describe the caches of CPU 0; empty where the system does not say."""
    if _is_windows():
        return []
    return _cache_sizes_from_dir(_CACHE_DIR)


def get_system_name() -> str:
    """Return the host name, or an empty string if it cannot be read."""
    try:
        return socket.gethostname()
    except OSError:
        return ""


def _num_cpus_from_cpuinfo(path: Path) -> int:
    try:
        handle = open(path, encoding="utf-8", errors="replace")
    except OSError:
        print("failed to open /proc/cpuinfo", file=sys.stderr)
        return -1

    key = "processor"
    s390 = platform.machine().startswith("s390")
    num_cpus = 0
    max_id = -1
    with handle:
        try:
            for raw in handle:
                line = raw.rstrip("\n")
                if not line:
                    continue
                split_idx = line.find(":")
                value = ""
                if split_idx >= 0:
                    if s390:
                        value = line[len(key) + 1 : split_idx]
                    else:
                        value = line[split_idx + 1 :]
                if line.startswith(key):
                    num_cpus += 1
                    if value:
                        max_id = max(parse_int(value), max_id)
        except OSError:
            print("Failure reading /proc/cpuinfo", file=sys.stderr)
            return -1

    if max_id + 1 != num_cpus:
        print(
            "CPU ID assignments in /proc/cpuinfo seem messed up."
            " This is usually caused by a bad BIOS.",
            file=sys.stderr,
        )
    return num_cpus


def get_num_cpus() -> int:
    """Return the number of logical CPUs, or -1 if /proc/cpuinfo is unreadable."""
    if _is_linux():
        return _num_cpus_from_cpuinfo(_PROC_CPUINFO)
    count = os.cpu_count()
    if count is None:
        raise SysInfoError("Unable to determine the number of CPUs")
    return count


def _starts_with_key(value: str, key: str) -> bool:
    return len(key) <= len(value) and value[: len(key)].lower() == key.lower()


def _cycles_from_linux(
    scaling: Scaling, cpu0_dir: Path, cpuinfo_path: Path
) -> float | None:
    """Clock rate from sysfs or cpuinfo; -1.0 on read errors, None if unknown."""
    cpu0_dir = Path(cpu0_dir)
    freq = _read_long(cpu0_dir / "tsc_freq_khz")
    if freq is None and scaling is Scaling.DISABLED:
        freq = _read_long(cpu0_dir / "cpufreq" / "scaling_cur_freq")
    if freq is None:
        freq = _read_long(cpu0_dir / "cpufreq" / "cpuinfo_max_freq")
    if freq is not None:
        return freq * 1000.0

    error_value = -1.0
    bogo_clock = error_value
    try:
        handle = open(cpuinfo_path, encoding="utf-8", errors="replace")
    except OSError:
        print("failed to open /proc/cpuinfo", file=sys.stderr)
        return error_value

    with handle:
        try:
            for raw in handle:
                line = raw.rstrip("\n")
                if not line:
                    continue
                split_idx = line.find(":")
                value = line[split_idx + 1 :] if split_idx >= 0 else ""
                # Only positive values are accepted; some virtual machines
                # report zero.
                if _starts_with_key(line, "cpu MHz"):
                    if value:
                        cycles_per_second = parse_float(value) * 1000000.0
                        if cycles_per_second > 0:
                            return cycles_per_second
                elif _starts_with_key(line, "bogomips"):
                    if value:
                        bogo_clock = parse_float(value) * 1000000.0
                        if bogo_clock < 0.0:
                            bogo_clock = error_value
        except OSError:
            print("Failure reading /proc/cpuinfo", file=sys.stderr)
            return error_value

    if bogo_clock >= 0.0:
        return bogo_clock
    return None


def _cycles_from_windows_registry() -> float | None:
    try:
        import winreg
    except ImportError:
        return None
    try:
        with winreg.OpenKey(
            winreg.HKEY_LOCAL_MACHINE,
            r"HARDWARE\DESCRIPTION\System\CentralProcessor\0",
        ) as key:
            mhz, _ = winreg.QueryValueEx(key, "~MHz")
    except OSError:
        return None
    return float(int(mhz) * 1000 * 1000)


def _estimate_cycles_per_second() -> float:
    start = cycleclock.now()
    time.sleep(_ESTIMATE_SECONDS)
    return float(cycleclock.now() - start)


def get_cpu_cycles_per_second(scaling: Scaling) -> float:
    """Return the CPU clock rate in cycles per second.

    Falls back to timing the cycle clock over one second of sleep when the
    system reports nothing usable.
    """
    if _is_linux():
        result = _cycles_from_linux(scaling, _CPU0_DIR, _PROC_CPUINFO)
    elif _is_windows():
        result = _cycles_from_windows_registry()
    else:
        result = None
    if result is not None:
        return result
    return _estimate_cycles_per_second()


def get_load_avg() -> list[float]:
    """Return up to three load averages; empty where unsupported."""
    if sys.platform == "win32" or hasattr(sys, "getandroidapilevel"):
        return []
    try:
        return list(os.getloadavg())
    except (OSError, AttributeError):
        return []


@dataclass(frozen=True)
class CPUInfo:
    """CPU facts gathered once per process."""

    num_cpus: int
    scaling: Scaling
    cycles_per_second: float
    caches: tuple[CacheInfo, ...]
    load_avg: tuple[float, ...]

    @classmethod
    def get(cls) -> CPUInfo:
        """Return the process-wide CPU description, gathering it on first use."""
        return _cpu_info()


@dataclass(frozen=True)
class SystemInfo:
    """Host facts gathered once per process."""

    name: str

    @classmethod
    def get(cls) -> SystemInfo:
        """Return the process-wide host description."""
        return _system_info()


@functools.lru_cache(maxsize=None)
def _cpu_info() -> CPUInfo:
    num_cpus = get_num_cpus()
    scaling = cpu_scaling(num_cpus)
    return CPUInfo(
        num_cpus=num_cpus,
        scaling=scaling,
        cycles_per_second=get_cpu_cycles_per_second(scaling),
        caches=tuple(get_cache_sizes()),
        load_avg=tuple(get_load_avg()),
    )


@functools.lru_cache(maxsize=None)
def _system_info() -> SystemInfo:
    return SystemInfo(name=get_system_name())