"""Top-level package for the business-logic portion of Form Layout Toolkit.

This package hosts the GUI-agnostic layout editing core. Front-ends should
only depend on the public API exposed here rather than importing internal
modules directly.
"""

from .core.identity import assign_missing_ids
from .core.models import Container, LayoutContext, LayoutNode, NodeVariant, Row
from .core.mutations import (
    add_child,
    delete_node,
    merge_with_previous,
    move_node,
    replace_node,
    split_to_own_row,
)
from .core.normalize import normalize_rows
from .core.serialization import export_json, strip_ids
from .core.tree_paths import locate

__all__: list[str] = [
    "Container",
    "LayoutContext",
    "LayoutNode",
    "NodeVariant",
    "Row",
    "add_child",
    "assign_missing_ids",
    "delete_node",
    "export_json",
    "locate",
    "merge_with_previous",
    "move_node",
    "normalize_rows",
    "replace_node",
    "split_to_own_row",
    "strip_ids",
]
