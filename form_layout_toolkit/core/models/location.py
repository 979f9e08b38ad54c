from __future__ import annotations

"""Slot and location value objects produced by the location resolver."""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from form_layout_toolkit.core.models.layout import LayoutNode

__all__ = ["TabsSlot", "RowSlot", "Slot", "SlotPath", "Location"]


@dataclass(frozen=True)
class TabsSlot:
    """The ``index``-th entry of a FORM's ``tabs``."""

    index: int


@dataclass(frozen=True)
class RowSlot:
    """The ``slot_index``-th entry of the ``row_index``-th row of a container."""

    row_index: int
    slot_index: int


Slot = Union[TabsSlot, RowSlot]

# Slots leading from the root down to a node; the root itself is ``()``.
SlotPath = Tuple[Slot, ...]


@dataclass(frozen=True)
class Location:
    """Where a node currently lives.

    Attributes
    ----------
    slot
        Position of the node inside its parent.
    parent_path
        Slots leading from the root to the parent.
    node
        The resolved node.
    parent
        The parent holding ``slot``.
    """

    slot: Slot
    parent_path: SlotPath
    node: LayoutNode
    parent: LayoutNode

    @property
    def path(self) -> SlotPath:
        """Full path from the root to the node."""
        return self.parent_path + (self.slot,)

    @property
    def in_tabs(self) -> bool:
        return isinstance(self.slot, TabsSlot)

    @property
    def row_slot(self) -> Optional[RowSlot]:
        return self.slot if isinstance(self.slot, RowSlot) else None
