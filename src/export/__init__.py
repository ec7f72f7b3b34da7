"""Batch loading and export of aggregated executive orders."""

from src.export.exporter import OrderExporter
from src.export.loader import BatchLoader
from src.export.search_index import build_search_index
from src.export.source_summary import build_source_summary, write_source_summary

__all__ = [
    "BatchLoader",
    "OrderExporter",
    "build_search_index",
    "build_source_summary",
    "write_source_summary",
]
