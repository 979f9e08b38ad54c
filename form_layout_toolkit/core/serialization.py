from __future__ import annotations

"""Wire format for layout trees.

The JSON shape follows the layout documents exchanged with the surrounding
application::

    {"name": "...", "type": "SECTION", "width": 12, "offset": 0,
     "contents": {"width": 12, "cellWidth": 1, "rows": [{"contents": [...]}]},
     "id": "..."}

FORM nodes carry ``tabs`` instead of ``contents``. Keys not known to the
model are kept in ``extra`` and written back next to the known ones.
"""

import json
from typing import Any, Dict, List

from form_layout_toolkit.core.models import Container, LayoutNode, NodeVariant, Row

__all__ = [
    "NODE_KEYS",
    "CONTAINER_KEYS",
    "node_to_dict",
    "node_from_dict",
    "strip_ids",
    "export_json",
]

NODE_KEYS = frozenset({"id", "name", "type", "width", "offset", "contents", "tabs"})
CONTAINER_KEYS = frozenset({"width", "cellWidth", "rows"})


def _container_to_dict(container: Container) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if container.width is not None:
        data["width"] = container.width
    if container.cell_width is not None:
        data["cellWidth"] = container.cell_width
    data.update(container.extra)
    data["rows"] = [{"contents": [node_to_dict(child) for child in row.contents]} for row in container.rows]
    return data


def node_to_dict(node: LayoutNode) -> Dict[str, Any]:
    """Serialize *node* and its subtree to plain JSON-compatible values."""
    data: Dict[str, Any] = {"name": node.name, "type": node.variant.value}
    if node.width is not None:
        data["width"] = node.width
    if node.offset is not None:
        data["offset"] = node.offset
    for key, value in node.extra.items():
        if key not in NODE_KEYS:
            data[key] = value
    if node.variant is NodeVariant.FORM:
        data["tabs"] = [node_to_dict(tab) for tab in node.tabs]
    elif node.container is not None:
        data["contents"] = _container_to_dict(node.container)
    if node.id:
        data["id"] = node.id
    return data


def node_from_dict(data: Dict[str, Any]) -> LayoutNode:
    """Inverse of :func:`node_to_dict` for documents that are already valid.

    Malformed input raises ``KeyError``/``ValueError``; lenient parsing of
    user files lives in ``core.importers.json_importer``.
    """
    variant = NodeVariant(data["type"])
    container = None
    contents = data.get("contents")
    if isinstance(contents, dict):
        rows: List[Row] = [
            Row(contents=tuple(node_from_dict(child) for child in row["contents"]))
            for row in contents.get("rows", [])
        ]
        container = Container(
            width=contents.get("width"),
            cell_width=contents.get("cellWidth"),
            rows=tuple(rows),
            extra={k: v for k, v in contents.items() if k not in CONTAINER_KEYS},
        )
    tabs = tuple(node_from_dict(tab) for tab in data.get("tabs", [])) if variant is NodeVariant.FORM else ()
    return LayoutNode(
        id=data.get("id") or None,
        name=data.get("name", ""),
        variant=variant,
        width=data.get("width"),
        offset=data.get("offset"),
        container=container,
        tabs=tabs,
        extra={k: v for k, v in data.items() if k not in NODE_KEYS},
    )


def strip_ids(value: Any) -> Any:
    """Recursively drop the ``id`` key from every mapping in *value*.

    Lists are walked element-wise; any other value is returned unchanged.
    """
    if isinstance(value, list):
        return [strip_ids(item) for item in value]
    if isinstance(value, dict):
        return {key: strip_ids(item) for key, item in value.items() if key != "id"}
    return value


def export_json(node: LayoutNode, indent: int = 2) -> str:
    """Debug/export view: the node as JSON text without internal ids."""
    return json.dumps(strip_ids(node_to_dict(node)), indent=indent)
