import socket

import pytest

from benchutil.sysinfo import (
    CacheInfo,
    CPUInfo,
    Scaling,
    SysInfoError,
    SystemInfo,
    _cache_sizes_from_dir,
    _cycles_from_linux,
    _num_cpus_from_cpuinfo,
    _scaling_from_sysfs,
    count_set_bits_in_cpu_map,
    cpu_scaling,
    get_load_avg,
    get_num_cpus,
    get_system_name,
)


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


def _cache_entry(root, idx, size, cache_type, level, cpu_map):
    entry = root / f"index{idx}"
    _write(entry / "size", size)
    _write(entry / "type", cache_type)
    _write(entry / "level", level)
    _write(entry / "shared_cpu_map", cpu_map)


# --- count_set_bits_in_cpu_map ---------------------------------------------


def test_count_bits_zero_mask():
    assert count_set_bits_in_cpu_map("0") == 0


def test_count_bits_empty_string():
    assert count_set_bits_in_cpu_map("") == 0


def test_count_bits_single_mask():
    assert count_set_bits_in_cpu_map("ff") == 8


def test_count_bits_groups_add_up():
    assert count_set_bits_in_cpu_map("ff,ff") == 2 * count_set_bits_in_cpu_map("ff")
    assert count_set_bits_in_cpu_map("f,f") == count_set_bits_in_cpu_map("ff")


def test_count_bits_trailing_comma_ignored():
    assert count_set_bits_in_cpu_map("ff,") == count_set_bits_in_cpu_map("ff")


def test_count_bits_leading_zero_groups():
    assert count_set_bits_in_cpu_map("00000000,0000000f") == count_set_bits_in_cpu_map(
        "f"
    )


# --- scaling ---------------------------------------------------------------


@pytest.mark.parametrize("num_cpus", [0, -1])
def test_cpu_scaling_unknown_without_cpus(num_cpus):
    assert cpu_scaling(num_cpus) is Scaling.UNKNOWN


def test_scaling_performance_governor_is_disabled(tmp_path):
    _write(tmp_path / "cpu0" / "cpufreq" / "scaling_governor", "performance\n")
    assert _scaling_from_sysfs(1, tmp_path) is Scaling.DISABLED


def test_scaling_other_governor_is_enabled(tmp_path):
    _write(tmp_path / "cpu0" / "cpufreq" / "scaling_governor", "performance\n")
    _write(tmp_path / "cpu1" / "cpufreq" / "scaling_governor", "powersave\n")
    assert _scaling_from_sysfs(2, tmp_path) is Scaling.ENABLED


def test_scaling_only_checks_requested_cpus(tmp_path):
    _write(tmp_path / "cpu0" / "cpufreq" / "scaling_governor", "performance\n")
    _write(tmp_path / "cpu1" / "cpufreq" / "scaling_governor", "powersave\n")
    assert _scaling_from_sysfs(1, tmp_path) is Scaling.DISABLED


def test_scaling_missing_files_is_disabled(tmp_path):
    assert _scaling_from_sysfs(4, tmp_path) is Scaling.DISABLED


# --- caches ----------------------------------------------------------------


def test_cache_sizes_with_kilobyte_suffix(tmp_path):
    _cache_entry(tmp_path, 0, "32K\n", "Data\n", "1\n", "00000003\n")
    assert _cache_sizes_from_dir(tmp_path) == [
        CacheInfo(
            type="Data",
            level=1,
            size=32 * 1024,
            num_sharing=count_set_bits_in_cpu_map("00000003"),
        )
    ]


def test_cache_sizes_plain_bytes(tmp_path):
    _cache_entry(tmp_path, 0, "512\n", "Unified\n", "2\n", "ff\n")
    (info,) = _cache_sizes_from_dir(tmp_path)
    assert info.size == 512
    assert info.type == "Unified"
    assert info.level == 2


def test_cache_sizes_stop_at_first_gap(tmp_path):
    _cache_entry(tmp_path, 0, "32K\n", "Data\n", "1\n", "1\n")
    _cache_entry(tmp_path, 1, "32K\n", "Instruction\n", "1\n", "1\n")
    _cache_entry(tmp_path, 3, "8192K\n", "Unified\n", "3\n", "ff\n")
    caches = _cache_sizes_from_dir(tmp_path)
    assert [c.type for c in caches] == ["Data", "Instruction"]


def test_cache_sizes_empty_directory(tmp_path):
    assert _cache_sizes_from_dir(tmp_path) == []


def test_cache_size_bad_suffix_raises(tmp_path):
    _cache_entry(tmp_path, 0, "32M\n", "Data\n", "1\n", "1\n")
    with pytest.raises(SysInfoError):
        _cache_sizes_from_dir(tmp_path)


def test_cache_size_not_a_number_raises(tmp_path):
    _cache_entry(tmp_path, 0, "big\n", "Data\n", "1\n", "1\n")
    with pytest.raises(SysInfoError):
        _cache_sizes_from_dir(tmp_path)


def test_cache_missing_type_raises(tmp_path):
    _cache_entry(tmp_path, 0, "32K\n", "Data\n", "1\n", "1\n")
    (tmp_path / "index0" / "type").unlink()
    with pytest.raises(SysInfoError):
        _cache_sizes_from_dir(tmp_path)


# --- cpu count -------------------------------------------------------------


def test_num_cpus_from_cpuinfo(tmp_path):
    path = tmp_path / "cpuinfo"
    path.write_text(
        "processor\t: 0\nmodel name\t: Example\n\n"
        "processor\t: 1\nmodel name\t: Example\n\n"
    )
    assert _num_cpus_from_cpuinfo(path) == 2


def test_num_cpus_counts_even_with_messed_up_ids(tmp_path):
    path = tmp_path / "cpuinfo"
    path.write_text("processor\t: 5\n\nprocessor\t: 9\n")
    assert _num_cpus_from_cpuinfo(path) == 2


def test_num_cpus_missing_file(tmp_path):
    assert _num_cpus_from_cpuinfo(tmp_path / "absent") == -1


def test_get_num_cpus_positive():
    assert get_num_cpus() > 0


# --- clock rate ------------------------------------------------------------


def test_cycles_from_tsc_frequency(tmp_path):
    _write(tmp_path / "cpu0" / "tsc_freq_khz", "2000000\n")
    result = _cycles_from_linux(Scaling.ENABLED, tmp_path / "cpu0", tmp_path / "none")
    assert result == 2000000 * 1000.0


def test_cycles_current_frequency_used_when_scaling_disabled(tmp_path):
    cpu0 = tmp_path / "cpu0"
    _write(cpu0 / "cpufreq" / "scaling_cur_freq", "1500000\n")
    _write(cpu0 / "cpufreq" / "cpuinfo_max_freq", "3000000\n")
    assert _cycles_from_linux(Scaling.DISABLED, cpu0, tmp_path / "none") == (
        1500000 * 1000.0
    )
    assert _cycles_from_linux(Scaling.ENABLED, cpu0, tmp_path / "none") == (
        3000000 * 1000.0
    )


def test_cycles_from_cpu_mhz(tmp_path):
    cpuinfo = tmp_path / "cpuinfo"
    cpuinfo.write_text("processor\t: 0\ncpu MHz\t\t: 2400.000\nbogomips\t: 4800.00\n")
    assert _cycles_from_linux(Scaling.ENABLED, tmp_path / "cpu0", cpuinfo) == (
        2400.0 * 1000000.0
    )


def test_cycles_fall_back_to_bogomips(tmp_path):
    cpuinfo = tmp_path / "cpuinfo"
    cpuinfo.write_text("processor\t: 0\nBogoMIPS\t: 50.00\n")
    assert _cycles_from_linux(Scaling.ENABLED, tmp_path / "cpu0", cpuinfo) == (
        50.0 * 1000000.0
    )


def test_cycles_zero_mhz_is_skipped(tmp_path):
    cpuinfo = tmp_path / "cpuinfo"
    cpuinfo.write_text("cpu MHz\t\t: 0\nbogomips\t: 4800.00\n")
    assert _cycles_from_linux(Scaling.ENABLED, tmp_path / "cpu0", cpuinfo) == (
        4800.0 * 1000000.0
    )


def test_cycles_unknown_without_any_figure(tmp_path):
    cpuinfo = tmp_path / "cpuinfo"
    cpuinfo.write_text("processor\t: 0\n")
    assert _cycles_from_linux(Scaling.ENABLED, tmp_path / "cpu0", cpuinfo) is None


def test_cycles_missing_cpuinfo_is_error(tmp_path):
    assert (
        _cycles_from_linux(Scaling.ENABLED, tmp_path / "cpu0", tmp_path / "absent")
        == -1.0
    )


# --- host and load ---------------------------------------------------------


def test_system_name_matches_host_name():
    assert get_system_name() == socket.gethostname()


def test_load_avg_shape():
    load = get_load_avg()
    assert len(load) <= 3
    assert all(value >= 0.0 for value in load)


def test_system_info_is_shared():
    info = SystemInfo.get()
    assert info is SystemInfo.get()
    assert info.name == get_system_name()


def test_cpu_info_is_shared_and_consistent():
    info = CPUInfo.get()
    assert info is CPUInfo.get()
    assert info.num_cpus == get_num_cpus()
    assert info.scaling is cpu_scaling(info.num_cpus)
    assert len(info.load_avg) <= 3