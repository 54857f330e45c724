"""Report modules"""

from .report_builder import SessionReport, build_report, export_report
from .status import build_monitor_status

__all__ = ["SessionReport", "build_report", "export_report", "build_monitor_status"]
