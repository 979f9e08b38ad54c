from __future__ import annotations

"""Locating nodes by id and rebuilding the path above an edited node.

Nodes carry no back-reference to their parent, so every lookup is a
top-down search from the root. The result is expressed as a slot path
(``core.models.location``) which :func:`rebuild_path` then uses to produce
a new root that shares every subtree off that path with the old one.

Traversal order is depth-first: a FORM's direct tabs are checked before
descending into any tab, a container's rows are visited in order, and each
child's own container is searched before moving to its next sibling.
"""

import logging
from typing import Callable, Iterator, Optional, Tuple

from form_layout_toolkit.core.models import (
    LayoutNode,
    Location,
    NodeVariant,
    Row,
    RowSlot,
    Slot,
    SlotPath,
    TabsSlot,
)

__all__ = [
    "locate",
    "path_to",
    "child_at",
    "node_at",
    "replace_child",
    "rebuild_path",
    "iter_nodes",
    "is_within",
]

logger = logging.getLogger(__name__)


def child_at(node: LayoutNode, slot: Slot) -> Optional[LayoutNode]:
    """Return the child of *node* held by *slot*, or None if out of range."""
    if isinstance(slot, TabsSlot):
        if node.variant is not NodeVariant.FORM or not 0 <= slot.index < len(node.tabs):
            return None
        return node.tabs[slot.index]
    rows = node.rows
    if not 0 <= slot.row_index < len(rows):
        return None
    contents = rows[slot.row_index].contents
    if not 0 <= slot.slot_index < len(contents):
        return None
    return contents[slot.slot_index]


def node_at(root: LayoutNode, path: SlotPath) -> Optional[LayoutNode]:
    """Follow *path* from *root*; None when any step is out of range."""
    node: Optional[LayoutNode] = root
    for slot in path:
        if node is None:
            return None
        node = child_at(node, slot)
    return node


def replace_child(node: LayoutNode, slot: Slot, child: LayoutNode) -> LayoutNode:
    """Return a copy of *node* whose child at *slot* is *child*.

    Sibling rows and sibling nodes are reused by reference.
    """
    if isinstance(slot, TabsSlot):
        tabs = list(node.tabs)
        tabs[slot.index] = child
        return node.with_tabs(tuple(tabs))
    rows = list(node.rows)
    contents = list(rows[slot.row_index].contents)
    contents[slot.slot_index] = child
    rows[slot.row_index] = Row(contents=tuple(contents))
    return node.with_rows(tuple(rows))


def rebuild_path(
    root: LayoutNode,
    path: SlotPath,
    transform: Callable[[LayoutNode], LayoutNode],
) -> LayoutNode:
    """Apply *transform* to the node at *path* and rebuild its ancestors.

    This is the one persistent-update primitive shared by every mutation:
    only the nodes from the root down to the transformed node are copied.
    If *transform* returns its argument unchanged, *root* itself is
    returned.
    """
    if not path:
        return transform(root)
    slot = path[0]
    child = child_at(root, slot)
    if child is None:
        logger.debug("rebuild_path: stale slot %r under %r", slot, root.id)
        return root
    new_child = rebuild_path(child, path[1:], transform)
    if new_child is child:
        return root
    return replace_child(root, slot, new_child)


def _child_slots(node: LayoutNode) -> Iterator[Tuple[Slot, LayoutNode]]:
    if node.variant is NodeVariant.FORM:
        for index, tab in enumerate(node.tabs):
            yield TabsSlot(index), tab
        return
    for row_index, row in enumerate(node.rows):
        for slot_index, child in enumerate(row.contents):
            yield RowSlot(row_index, slot_index), child


def _search(node: LayoutNode, node_id: str, parent_path: SlotPath) -> Optional[Location]:
    if node.variant is NodeVariant.FORM:
        # All direct tabs are checked before descending into any of them.
        for slot, tab in _child_slots(node):
            if tab.id == node_id:
                return Location(slot=slot, parent_path=parent_path, node=tab, parent=node)
        for slot, tab in _child_slots(node):
            found = _search(tab, node_id, parent_path + (slot,))
            if found is not None:
                return found
        return None

    for slot, child in _child_slots(node):
        if child.id == node_id:
            return Location(slot=slot, parent_path=parent_path, node=child, parent=node)
        found = _search(child, node_id, parent_path + (slot,))
        if found is not None:
            return found
    return None


def locate(root: LayoutNode, node_id: Optional[str]) -> Optional[Location]:
    """Find the slot holding the node with *node_id*.

    Returns None when no node below *root* carries the id (including when
    the id belongs to the root itself, which has no slot). Callers treat
    None as "stale id, nothing to do".
    """
    if not node_id or root is None:
        return None
    return _search(root, node_id, ())


def path_to(root: LayoutNode, node_id: Optional[str]) -> Optional[SlotPath]:
    """Full slot path to *node_id*: ``()`` for the root, None if absent."""
    if not node_id or root is None:
        return None
    if root.id == node_id:
        return ()
    location = locate(root, node_id)
    return location.path if location is not None else None


def iter_nodes(root: LayoutNode) -> Iterator[LayoutNode]:
    """Yield *root* and all descendants, depth-first in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children()))


def is_within(ancestor_path: SlotPath, path: SlotPath) -> bool:
    """Return True if *path* equals or lies below *ancestor_path*."""
    return path[: len(ancestor_path)] == ancestor_path
