"""Reporting utilities for mlpnet."""

from .artifacts import write_manifest
from .metrics import CsvSink, HistoryCapture, JsonlSink, LoggingSink
from .plots import PlotAdapter, describe_run
from .summary import write_summary

__all__ = [
    "CsvSink",
    "HistoryCapture",
    "JsonlSink",
    "LoggingSink",
    "PlotAdapter",
    "describe_run",
    "write_manifest",
    "write_summary",
]
