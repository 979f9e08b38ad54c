from __future__ import annotations

"""JSON layout importer.

Turns a user-supplied JSON document into a valid layout tree: missing names
get readable fallbacks, unknown node types become FIELD, empty rows are
pruned, a repeated id is kept only on its first node, and every node
receives an id. Structural problems that cannot be repaired (non-object
nodes, rows without ``contents``, children a parent may not host) raise
:class:`LayoutImportError`.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from form_layout_toolkit.config import ConfigManager
from form_layout_toolkit.core.identity import IdGenerator, assign_missing_ids
from form_layout_toolkit.core.importers.exceptions import LayoutImportError
from form_layout_toolkit.core.importers.metadata import source_metadata
from form_layout_toolkit.core.models import (
    ROWS_HOSTING_VARIANTS,
    Container,
    LayoutNode,
    NodeVariant,
    Row,
    Scalar,
    can_contain,
    coerce_variant,
)
from form_layout_toolkit.core.normalize import normalize_rows
from form_layout_toolkit.core.serialization import CONTAINER_KEYS, NODE_KEYS

logger = logging.getLogger(__name__)

__all__ = ["JsonLayoutImporter", "parse_form", "load_form_json"]

DEFAULT_FORM_NAME = "IMPORTED_FORM"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_grid_value(value: Any) -> Optional[Union[int, float]]:
    if not _is_number(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _scalar_extras(record: Mapping[str, Any], known: frozenset, where: str) -> Dict[str, Scalar]:
    extras: Dict[str, Scalar] = {}
    for key, value in record.items():
        if key in known:
            continue
        if value is None or isinstance(value, (str, int, float, bool)):
            extras[key] = value
        else:
            logger.warning("Import: dropping non-scalar property '%s' on %s", key, where)
    return extras


def _claim_id(raw_id: Any, seen: Set[str], where: str) -> Optional[str]:
    """Keep the first use of an id; later repeats are dropped for backfill."""
    if not isinstance(raw_id, str) or not raw_id:
        return None
    if raw_id in seen:
        logger.warning("Import: duplicate id '%s' on '%s' replaced", raw_id, where)
        return None
    seen.add(raw_id)
    return raw_id


def _normalize_container(record: Mapping[str, Any], owner: NodeVariant, where: str, seen: Set[str]) -> Container:
    raw_rows = record.get("rows")
    rows: List[Row] = []
    for row_index, raw_row in enumerate(raw_rows):
        if not isinstance(raw_row, dict) or not isinstance(raw_row.get("contents"), list):
            raise LayoutImportError(f"Row {row_index + 1} is missing a contents array.")
        children = []
        for child_index, raw_child in enumerate(raw_row["contents"]):
            child = _normalize_node(raw_child, f"Unnamed Node {row_index + 1}.{child_index + 1}", seen)
            if not can_contain(owner, child.variant):
                raise LayoutImportError(
                    f"{owner.value} '{where}' cannot contain {child.variant.value} '{child.name}'."
                )
            children.append(child)
        rows.append(Row(contents=tuple(children)))
    return Container(
        width=_as_grid_value(record.get("width")),
        cell_width=_as_grid_value(record.get("cellWidth")),
        rows=tuple(rows),
        extra=_scalar_extras(record, CONTAINER_KEYS, f"container of '{where}'"),
    )


def _normalize_node(raw: Any, fallback_name: str, seen: Set[str]) -> LayoutNode:
    if not isinstance(raw, dict):
        raise LayoutImportError("Node entries must be objects.")

    variant = coerce_variant(raw.get("type")) or NodeVariant.FIELD
    raw_name = raw.get("name")
    name = raw_name if isinstance(raw_name, str) and raw_name.strip() else fallback_name
    node_id = _claim_id(raw.get("id"), seen, name)

    container = None
    contents = raw.get("contents")
    if isinstance(contents, dict) and isinstance(contents.get("rows"), list):
        if variant in ROWS_HOSTING_VARIANTS:
            container = _normalize_container(contents, variant, name, seen)
        else:
            logger.warning("Import: ignoring rows on %s '%s'", variant.value, name)
    if container is None and variant in ROWS_HOSTING_VARIANTS:
        container = Container()

    return LayoutNode(
        id=node_id,
        name=name,
        variant=variant,
        width=_as_grid_value(raw.get("width")),
        offset=_as_grid_value(raw.get("offset")),
        container=container,
        extra=_scalar_extras(raw, NODE_KEYS, f"'{name}'"),
    )


def parse_form(
    raw: Any,
    fallback_name: str = DEFAULT_FORM_NAME,
    generator: Optional[IdGenerator] = None,
) -> LayoutNode:
    """Normalise a decoded JSON value into a FORM tree with ids assigned."""
    if not isinstance(raw, dict):
        raise LayoutImportError("File does not contain a JSON object.")
    if raw.get("type") != NodeVariant.FORM.value:
        raise LayoutImportError('Root object must have type "FORM".')

    raw_name = raw.get("name")
    name = raw_name if isinstance(raw_name, str) and raw_name.strip() else fallback_name
    raw_tabs = raw.get("tabs") if isinstance(raw.get("tabs"), list) else []
    seen: Set[str] = set()
    form_id = _claim_id(raw.get("id"), seen, name)

    tabs = []
    for index, raw_tab in enumerate(raw_tabs):
        tab = _normalize_node(raw_tab, f"Imported Tab {index + 1}", seen)
        if tab.variant is not NodeVariant.TAB:
            raise LayoutImportError(f"Form entry {index + 1} must be a TAB, got {tab.variant.value}.")
        tabs.append(tab)

    form = LayoutNode(
        id=form_id,
        name=name,
        variant=NodeVariant.FORM,
        width=_as_grid_value(raw.get("width")),
        offset=_as_grid_value(raw.get("offset")),
        tabs=tuple(tabs),
        extra=_scalar_extras(raw, NODE_KEYS, f"form '{name}'"),
    )
    return assign_missing_ids(normalize_rows(form), generator)


def load_form_json(
    text: str,
    fallback_name: str = DEFAULT_FORM_NAME,
    generator: Optional[IdGenerator] = None,
) -> LayoutNode:
    """Decode JSON *text* and normalise it with :func:`parse_form`."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LayoutImportError(f"Invalid JSON: {exc.msg} (line {exc.lineno})", cause=exc) from exc
    return parse_form(raw, fallback_name, generator)


class JsonLayoutImporter:
    """Importer for ``.json`` layout documents on disk."""

    def __init__(self, fallback_name: Optional[str] = None,
                 generator: Optional[IdGenerator] = None) -> None:
        if fallback_name is None:
            settings = ConfigManager().get_import_settings()
            fallback_name = settings.get("form_fallback_name") or DEFAULT_FORM_NAME
        self._fallback_name = fallback_name
        self._generator = generator
        self.logger = logging.getLogger(f"{__name__}.JsonLayoutImporter")

    def can_import(self, file_path: Path) -> bool:
        """Return True for existing files with a ``.json`` suffix."""
        return file_path.is_file() and file_path.suffix.lower() == ".json"

    def source_metadata(self, file_path: Path) -> Dict[str, Any]:
        return source_metadata(file_path, "json")

    def import_file(self, file_path: Path) -> LayoutNode:
        """Read and normalise *file_path*.

        Raises
        ------
        LayoutImportError
            When the file cannot be read or is not a valid layout document.
        """
        self.logger.info("Import: reading JSON layout %s", file_path)
        try:
            text = Path(file_path).read_text(encoding="utf-8")
        except OSError as exc:
            raise LayoutImportError("Failed to read the selected file.", file_path, exc) from exc
        try:
            form = load_form_json(text, self._fallback_name, self._generator)
        except LayoutImportError as exc:
            self.logger.error("Import FAIL: %s: %s", file_path, exc)
            raise LayoutImportError(str(exc), file_path, exc.cause) from exc
        self.logger.info("Import OK: form '%s' with %d tab(s)", form.name, len(form.tabs))
        return form
