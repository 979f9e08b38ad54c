from __future__ import annotations

"""Build a layout tree from tabular field records.

Each record (one worksheet row, already read into a mapping of column header
to cell value) describes one field. Workbooks are read with pandas; CSV
exports are read directly. Records are grouped by tab, then
by section, in first-seen order; every field gets its own grid row.
"""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from form_layout_toolkit.config import ConfigManager
from form_layout_toolkit.core.identity import IdGenerator, assign_missing_ids
from form_layout_toolkit.core.importers.exceptions import LayoutImportError
from form_layout_toolkit.core.importers.metadata import source_metadata
from form_layout_toolkit.core.models import Container, LayoutNode, NodeVariant, Row, coerce_variant

logger = logging.getLogger(__name__)

__all__ = [
    "ColumnMapping",
    "ImportPreview",
    "SpreadsheetLayoutImporter",
    "build_form_from_records",
    "preview_stats",
    "read_csv_records",
    "read_excel_records",
    "read_records",
]

DEFAULT_TAB_NAME = "Default Tab"
DEFAULT_SECTION_NAME = "Default Section"
DEFAULT_FORM_NAME = "IMPORTED_FORM"

EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xls")
SUPPORTED_SUFFIXES = EXCEL_SUFFIXES + (".csv",)


@dataclass(frozen=True)
class ColumnMapping:
    """Which column holds each property. Optional columns may be None."""

    tab_name: str = "Tab Name"
    section_name: str = "Section Name"
    name: str = "Field Design Name"
    type: Optional[str] = "Display Type"
    width: Optional[str] = "Width"
    offset: Optional[str] = "Offset"

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> "ColumnMapping":
        known = {k: v for k, v in (data or {}).items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass(frozen=True)
class ImportPreview:
    """Counts shown to the user before committing an import."""

    tabs: int
    sections: int
    fields: int


def _cell(record: Mapping[str, Any], column: Optional[str]) -> Any:
    if not column:
        return None
    value = record.get(column)
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _group_name(value: Any, default: str) -> str:
    text = str(value).strip() if value is not None else ""
    return text or default


def _grid_number(value: Any, default: int, column: Optional[str], line: int) -> int:
    if value is None:
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError) as exc:
        raise LayoutImportError(f"Record {line}: column '{column}' is not a number: {value!r}", cause=exc) from exc


def _field_variant(value: Any) -> NodeVariant:
    variant = coerce_variant(value) if value is not None else None
    if variant in (NodeVariant.FIELD, NodeVariant.SUBFORM):
        return variant
    return NodeVariant.FIELD


def _grouped(records: Iterable[Mapping[str, Any]], mapping: ColumnMapping) -> Dict[str, Dict[str, List]]:
    """Group named records as ``{tab: {section: [(line, record), ...]}}``."""
    tabs: Dict[str, Dict[str, List]] = {}
    for line, record in enumerate(records, start=1):
        if _cell(record, mapping.name) is None:
            continue
        tab = _group_name(_cell(record, mapping.tab_name), DEFAULT_TAB_NAME)
        section = _group_name(_cell(record, mapping.section_name), DEFAULT_SECTION_NAME)
        tabs.setdefault(tab, {}).setdefault(section, []).append((line, record))
    return tabs


def preview_stats(records: Iterable[Mapping[str, Any]], mapping: Optional[ColumnMapping] = None) -> ImportPreview:
    """Count the tabs, sections and fields an import would produce."""
    grouped = _grouped(records, mapping or ColumnMapping())
    sections = sum(len(secs) for secs in grouped.values())
    fields = sum(len(items) for secs in grouped.values() for items in secs.values())
    return ImportPreview(tabs=len(grouped), sections=sections, fields=fields)


def build_form_from_records(
    records: Iterable[Mapping[str, Any]],
    mapping: Optional[ColumnMapping] = None,
    form_name: str = "",
    default_width: int = 3,
    default_offset: int = 0,
    generator: Optional[IdGenerator] = None,
) -> LayoutNode:
    """Build a FORM → TAB → SECTION → FIELD tree from *records*.

    Records without a field name are skipped. Blank tab or section cells
    fall back to "Default Tab" / "Default Section".
    """
    mapping = mapping or ColumnMapping()
    tab_nodes = []
    for tab_name, sections in _grouped(records, mapping).items():
        section_rows = []
        for section_name, items in sections.items():
            field_rows = []
            for line, record in items:
                variant = _field_variant(_cell(record, mapping.type))
                field = LayoutNode(
                    name=str(_cell(record, mapping.name)).strip(),
                    variant=variant,
                    width=_grid_number(_cell(record, mapping.width), default_width, mapping.width, line),
                    offset=_grid_number(_cell(record, mapping.offset), default_offset, mapping.offset, line),
                    container=Container(width=12, cell_width=1) if variant is NodeVariant.SUBFORM else None,
                )
                field_rows.append(Row(contents=(field,)))
            section = LayoutNode(
                name=section_name,
                variant=NodeVariant.SECTION,
                width=12,
                offset=0,
                container=Container(width=12, cell_width=1, rows=tuple(field_rows)),
            )
            section_rows.append(Row(contents=(section,)))
        tab_nodes.append(LayoutNode(
            name=tab_name,
            variant=NodeVariant.TAB,
            width=12,
            offset=0,
            container=Container(width=12, cell_width=1, rows=tuple(section_rows)),
        ))

    form = LayoutNode(
        name=form_name.strip() if form_name and form_name.strip() else DEFAULT_FORM_NAME,
        variant=NodeVariant.FORM,
        tabs=tuple(tab_nodes),
    )
    logger.info("Import: built form '%s' with %d tab(s)", form.name, len(form.tabs))
    return assign_missing_ids(form, generator)


def read_csv_records(file_path: Path, encoding: str = "utf-8-sig") -> List[Dict[str, str]]:
    """Read a CSV export (header row first) into a list of records."""
    try:
        with open(file_path, newline="", encoding=encoding) as fh:
            return [dict(row) for row in csv.DictReader(fh)]
    except (OSError, csv.Error, UnicodeDecodeError) as exc:
        raise LayoutImportError("Failed to read the selected file.", file_path, exc) from exc


def read_excel_records(file_path: Path, sheet_name: Union[int, str] = 0) -> List[Dict[str, Any]]:
    """Read one worksheet (the first by default) into a list of records.

    The first row holds the column headers. Blank cells come back as None.
    """
    try:
        frame = pd.read_excel(file_path, sheet_name=sheet_name, dtype=object)
    except Exception as exc:
        # pandas surfaces engine-specific errors for corrupt or foreign files
        raise LayoutImportError("Failed to read the selected file.", file_path, exc) from exc
    frame = frame.where(frame.notna(), None)
    return [{str(key): value for key, value in row.items()} for row in frame.to_dict(orient="records")]


def read_records(file_path: Path) -> List[Dict[str, Any]]:
    """Read a workbook or CSV export, chosen by file suffix."""
    suffix = Path(file_path).suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        return read_excel_records(file_path)
    if suffix == ".csv":
        return read_csv_records(file_path)
    raise LayoutImportError(f"Unsupported spreadsheet format '{suffix}'.", file_path)


class SpreadsheetLayoutImporter:
    """Importer for field spreadsheets (Excel workbooks or CSV exports).

    Column mapping and default grid values come from the ``import`` section
    of ``editor.yml`` unless given explicitly.
    """

    def __init__(self, mapping: Optional[ColumnMapping] = None,
                 settings: Optional[Mapping[str, Any]] = None,
                 generator: Optional[IdGenerator] = None) -> None:
        if settings is None:
            settings = ConfigManager().get_import_settings()
        sheet = settings.get("spreadsheet", {}) or {}
        self.mapping = mapping or ColumnMapping.from_config(sheet.get("columns", {}))
        self.default_width = int(sheet.get("default_width", 3))
        self.default_offset = int(sheet.get("default_offset", 0))
        self.fallback_name = settings.get("form_fallback_name", DEFAULT_FORM_NAME)
        self._generator = generator
        self.logger = logging.getLogger(f"{__name__}.SpreadsheetLayoutImporter")

    def can_import(self, file_path: Path) -> bool:
        return file_path.is_file() and file_path.suffix.lower() in SUPPORTED_SUFFIXES

    def source_metadata(self, file_path: Path) -> Dict[str, Any]:
        return source_metadata(file_path, "spreadsheet")

    def preview(self, records: Iterable[Mapping[str, Any]]) -> ImportPreview:
        return preview_stats(records, self.mapping)

    def build(self, records: Iterable[Mapping[str, Any]], form_name: str = "") -> LayoutNode:
        return build_form_from_records(
            records,
            self.mapping,
            form_name or self.fallback_name,
            self.default_width,
            self.default_offset,
            self._generator,
        )

    def import_file(self, file_path: Path, form_name: str = "") -> LayoutNode:
        """Read a spreadsheet and build the form (named after the file if *form_name* is blank)."""
        self.logger.info("Import: reading spreadsheet records %s", file_path)
        records = read_records(file_path)
        return self.build(records, form_name or Path(file_path).stem)
