"""Data export for the admin back office."""

from sbe_earthing.export.exporter import (
    EXPORT_FORMATS,
    DataExporter,
    DateRange,
    ExportData,
    ExportFile,
    ExportOptions,
    format_date,
    matches_filters,
    parse_datetime,
)

__all__ = [
    "EXPORT_FORMATS",
    "DataExporter",
    "DateRange",
    "ExportData",
    "ExportFile",
    "ExportOptions",
    "format_date",
    "matches_filters",
    "parse_datetime",
]
