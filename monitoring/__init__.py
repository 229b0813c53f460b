# PATH: monitoring/__init__.py
"""Monitoring package for XLEG."""

from monitoring.session_report import (
    ExecutionReport,
    ScanReport,
    build_execution_report,
    build_scan_report,
    print_execution_report,
    print_scan_report,
    SCHEMA_VERSION,
)

__all__ = [
    "ExecutionReport",
    "ScanReport",
    "build_execution_report",
    "build_scan_report",
    "print_execution_report",
    "print_scan_report",
    "SCHEMA_VERSION",
]
