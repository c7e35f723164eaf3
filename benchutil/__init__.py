"""Tick counter, statistics, number formatting and machine information helpers for benchmarks."""

__version__ = "0.1.0"
__all__ = ["cycleclock", "statistics", "strings", "sysinfo"]