from __future__ import annotations

"""Shared data structures used across the Form Layout Toolkit core.

This package exposes the immutable layout tree types and the location value
objects used by services and other core layers. It is intentionally free of
UI / I/O code so that the contained objects can be reused in any context
(unit-tests, CLI, GUI, etc.).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .layout import (
    ALLOWED_CHILDREN,
    ROWS_HOSTING_VARIANTS,
    Container,
    LayoutNode,
    NodeVariant,
    Row,
    Scalar,
    can_contain,
    coerce_variant,
)
from .location import Location, RowSlot, Slot, SlotPath, TabsSlot

__all__ = [
    "ALLOWED_CHILDREN",
    "ROWS_HOSTING_VARIANTS",
    "Container",
    "LayoutContext",
    "LayoutNode",
    "Location",
    "NodeVariant",
    "Row",
    "RowSlot",
    "Scalar",
    "Slot",
    "SlotPath",
    "TabsSlot",
    "can_contain",
    "coerce_variant",
]


@dataclass
class LayoutContext:
    """Mutable holder of the document currently being edited.

    Attributes
    ----------
    root
        Current FORM root. Replaced (never mutated) on every committed edit.
    selected_id
        Id of the node selected in the UI, or None.
    metadata
        Source description of the loaded document (file, importer type,
        import time), set by ``StructureEditingService.load``.
    """

    root: Optional[LayoutNode] = None
    selected_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
