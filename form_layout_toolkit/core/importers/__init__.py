"""Importers turning external documents into layout trees."""

from .exceptions import LayoutImportError
from .metadata import source_metadata
from .json_importer import JsonLayoutImporter, load_form_json, parse_form
from .spreadsheet_importer import (
    ColumnMapping,
    ImportPreview,
    SpreadsheetLayoutImporter,
    build_form_from_records,
    preview_stats,
    read_csv_records,
    read_excel_records,
    read_records,
)

__all__ = [
    "ColumnMapping",
    "ImportPreview",
    "SpreadsheetLayoutImporter",
    "JsonLayoutImporter",
    "LayoutImportError",
    "build_form_from_records",
    "load_form_json",
    "parse_form",
    "preview_stats",
    "read_csv_records",
    "read_excel_records",
    "read_records",
    "source_metadata",
]
