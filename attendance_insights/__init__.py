"""
Class Attendance Insights

Aggregates fitness-class attendance exports into per-slot summaries,
rankings, pivot tables and chart series for interactive exploration.
"""

__version__ = "1.0.0"
