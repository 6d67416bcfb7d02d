"""Reporting utilities for perceptronets."""

from .artifacts import parameter_count, write_manifest
from .metrics import CsvSink, HistorySink, JsonlSink
from .plots import PlotAdapter
from .summary import read_losses, summarize, write_summary

__all__ = [
    "CsvSink",
    "HistorySink",
    "JsonlSink",
    "PlotAdapter",
    "parameter_count",
    "read_losses",
    "summarize",
    "write_manifest",
    "write_summary",
]
