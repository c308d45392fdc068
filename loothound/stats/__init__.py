"""
Derived snapshot statistics.
"""
from .calculator import StatCard, Trend, build_stats, classify_trend, compare_snapshots

__all__ = ["StatCard", "Trend", "build_stats", "classify_trend", "compare_snapshots"]
