from __future__ import annotations

"""Pure structural edits on a layout tree.

Every function takes the current root and returns a new root built by
:func:`~form_layout_toolkit.core.tree_paths.rebuild_path`, or the very same
root object when the request is a no-op (stale id, containment violation,
nothing to do). No function raises for such requests and none applies a
mutation partially. Every result goes through the row normalizer.

Examples
--------
    root = add_child(root, section_id, "FIELD")
    root = merge_with_previous(root, field_id)
    if new_root is root:
        ...  # nothing changed
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Union

from form_layout_toolkit.core.identity import IdGenerator, default_generator
from form_layout_toolkit.core.models import (
    ROWS_HOSTING_VARIANTS,
    Container,
    LayoutNode,
    Location,
    NodeVariant,
    Row,
    RowSlot,
    TabsSlot,
    can_contain,
    coerce_variant,
)
from form_layout_toolkit.core.normalize import normalize_rows
from form_layout_toolkit.core.tree_paths import is_within, locate, path_to, rebuild_path

__all__ = [
    "NodeDefaults",
    "new_node",
    "add_child",
    "delete_node",
    "move_node",
    "merge_with_previous",
    "split_to_own_row",
    "replace_node",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeDefaults:
    """Property values given to nodes created by :func:`add_child`."""

    width: int = 12
    offset: int = 0
    container_width: Optional[float] = 12
    container_cell_width: Optional[float] = 1
    name_template: str = "New {variant}"


def new_node(
    variant: NodeVariant,
    defaults: Optional[NodeDefaults] = None,
    generator: Optional[IdGenerator] = None,
) -> LayoutNode:
    """Create a fresh node of *variant* with a new id and placeholder name."""
    defaults = defaults or NodeDefaults()
    gen = generator or default_generator()
    container = None
    if variant in ROWS_HOSTING_VARIANTS:
        container = Container(width=defaults.container_width, cell_width=defaults.container_cell_width)
    return LayoutNode(
        id=gen.next_id(),
        name=defaults.name_template.format(variant=variant.value),
        variant=variant,
        width=defaults.width,
        offset=defaults.offset,
        container=container,
    )


# ---------------------------------------------------------------------------
# Row-level helpers (operate on the parent node only)
# ---------------------------------------------------------------------------

def _without_row_item(parent: LayoutNode, slot: RowSlot) -> LayoutNode:
    """Take the item out of its row; an emptied row stays until normalization."""
    rows = list(parent.rows)
    contents = rows[slot.row_index].contents
    rows[slot.row_index] = Row(contents=contents[: slot.slot_index] + contents[slot.slot_index + 1:])
    return parent.with_rows(tuple(rows))


def _with_row_inserted(parent: LayoutNode, index: int, node: LayoutNode) -> LayoutNode:
    rows = list(parent.rows)
    rows.insert(index, Row(contents=(node,)))
    return parent.with_rows(tuple(rows))


def _with_row_appended(parent: LayoutNode, node: LayoutNode) -> LayoutNode:
    return _with_row_inserted(parent, len(parent.rows), node)


def _without_tab(form: LayoutNode, index: int) -> LayoutNode:
    return form.with_tabs(form.tabs[:index] + form.tabs[index + 1:])


def _detach(root: LayoutNode, location: Location) -> LayoutNode:
    """Remove the located node from its slot without pruning its row."""
    slot = location.slot
    if isinstance(slot, TabsSlot):
        return rebuild_path(root, location.parent_path, lambda form: _without_tab(form, slot.index))
    return rebuild_path(root, location.parent_path, lambda parent: _without_row_item(parent, slot))


# ---------------------------------------------------------------------------
# Public operations
# ---------------------------------------------------------------------------

def add_child(
    root: LayoutNode,
    parent_id: str,
    child_variant: Union[NodeVariant, str],
    defaults: Optional[NodeDefaults] = None,
    generator: Optional[IdGenerator] = None,
) -> LayoutNode:
    """Append a new node of *child_variant* under *parent_id*.

    FORM parents get the new TAB appended to ``tabs``; every other parent
    gets it as a new singleton row at the end of its container, so a fresh
    node always shows up on its own grid line.
    """
    variant = coerce_variant(child_variant)
    path = path_to(root, parent_id)
    if variant is None or path is None:
        logger.debug("add_child noop: parent=%s variant=%s unresolved", parent_id, child_variant)
        return root

    def attach(parent: LayoutNode) -> LayoutNode:
        if not can_contain(parent.variant, variant):
            logger.debug("add_child noop: %s cannot host %s", parent.variant.value, variant.value)
            return parent
        child = new_node(variant, defaults, generator)
        if parent.variant is NodeVariant.FORM:
            return parent.with_tabs(parent.tabs + (child,))
        return _with_row_appended(parent, child)

    return normalize_rows(rebuild_path(root, path, attach))


def delete_node(root: LayoutNode, target_id: str) -> LayoutNode:
    """Remove *target_id* from its tabs list or row; drop the row if emptied."""
    location = locate(root, target_id)
    if location is None:
        logger.debug("delete_node noop: id=%s not found", target_id)
        return root
    return normalize_rows(_detach(root, location))


def move_node(root: LayoutNode, active_id: str, over_id: str) -> LayoutNode:
    """Drop *active_id* onto *over_id*: reparent, reorder tabs, or reorder rows.

    Precedence:

    1. When ``over`` is a TAB or SECTION of a different variant that may
       host ``active``, ``active`` is appended to ``over`` as a new
       singleton row (reparent).
    2. When both are tabs, ``active`` takes ``over``'s index in ``tabs``.
    3. When both are row items, ``active`` gets a new singleton row at
       ``over``'s row index, one further down for a forward move inside the
       same container.

    Anything else, including dropping a node into its own subtree, is a
    no-op.
    """
    if not active_id or not over_id or active_id == over_id:
        return root
    active = locate(root, active_id)
    over = locate(root, over_id)
    if active is None or over is None:
        logger.debug("move_node noop: active=%s over=%s unresolved", active_id, over_id)
        return root
    if is_within(active.path, over.path):
        logger.debug("move_node noop: %s lies inside %s", over_id, active_id)
        return root

    active_variant = active.node.variant
    over_variant = over.node.variant

    if (
        over_variant in (NodeVariant.TAB, NodeVariant.SECTION)
        and active_variant is not over_variant
        and can_contain(over_variant, active_variant)
    ):
        return _reparent(root, active, over)

    if isinstance(active.slot, TabsSlot) and isinstance(over.slot, TabsSlot):
        if active.parent_path != over.parent_path:
            return root
        source, target = active.slot.index, over.slot.index

        def reorder(form: LayoutNode) -> LayoutNode:
            tabs = list(form.tabs)
            moved = tabs.pop(source)
            tabs.insert(target, moved)
            return form.with_tabs(tuple(tabs))

        return normalize_rows(rebuild_path(root, active.parent_path, reorder))

    if isinstance(active.slot, RowSlot) and isinstance(over.slot, RowSlot):
        return _reorder_rows(root, active, over)

    logger.debug("move_node noop: %s onto %s has no applicable rule", active_variant.value, over_variant.value)
    return root


def _reparent(root: LayoutNode, active: Location, over: Location) -> LayoutNode:
    if active.parent_path == over.path:
        logger.debug("move_node noop: %s already sits in %s", active.node.id, over.node.id)
        return root
    detached = _detach(root, active)
    target_path = path_to(detached, over.node.id)
    if target_path is None:
        return root
    moved = rebuild_path(detached, target_path, lambda parent: _with_row_appended(parent, active.node))
    return normalize_rows(moved)


def _reorder_rows(root: LayoutNode, active: Location, over: Location) -> LayoutNode:
    if not can_contain(over.parent.variant, active.node.variant):
        logger.debug(
            "move_node noop: %s cannot host %s",
            over.parent.variant.value,
            active.node.variant.value,
        )
        return root

    target_row = over.slot.row_index
    same_parent = active.parent_path == over.parent_path
    if same_parent and active.slot.row_index < target_row:
        target_row += 1

    # Detaching keeps the emptied row in place so row indices stay valid,
    # but slot indices on over's ancestor path may shift: resolve it again.
    detached = _detach(root, active)
    relocated = locate(detached, over.node.id)
    if relocated is None:
        return root
    moved = rebuild_path(
        detached,
        relocated.parent_path,
        lambda parent: _with_row_inserted(parent, target_row, active.node),
    )
    return normalize_rows(moved)


def merge_with_previous(root: LayoutNode, node_id: str) -> LayoutNode:
    """Move a row item to the end of the row directly above it."""
    location = locate(root, node_id)
    if location is None or not isinstance(location.slot, RowSlot):
        return root
    slot = location.slot
    if slot.row_index == 0:
        logger.debug("merge_with_previous noop: %s is in the first row", node_id)
        return root

    def merge(parent: LayoutNode) -> LayoutNode:
        rows = list(_without_row_item(parent, slot).rows)
        previous = rows[slot.row_index - 1]
        rows[slot.row_index - 1] = Row(contents=previous.contents + (location.node,))
        return parent.with_rows(tuple(rows))

    return normalize_rows(rebuild_path(root, location.parent_path, merge))


def split_to_own_row(root: LayoutNode, node_id: str) -> LayoutNode:
    """Move a row item into a new singleton row directly below its row."""
    location = locate(root, node_id)
    if location is None or not isinstance(location.slot, RowSlot):
        return root
    slot = location.slot
    if len(location.parent.rows[slot.row_index].contents) <= 1:
        logger.debug("split_to_own_row noop: %s is already alone", node_id)
        return root

    def split(parent: LayoutNode) -> LayoutNode:
        return _with_row_inserted(_without_row_item(parent, slot), slot.row_index + 1, location.node)

    return normalize_rows(rebuild_path(root, location.parent_path, split))


def replace_node(root: LayoutNode, updated: LayoutNode) -> LayoutNode:
    """Commit an edited copy of a node, matched by id.

    A FORM replaces the whole root. For any other node the id must resolve
    and the new variant must still be allowed under the current parent.
    In both cases the node's own children must be allowed under the new
    variant; a FIELD may not keep a container that holds rows.
    """
    hosted = updated.children()
    if updated.variant is NodeVariant.FORM:
        hosted += tuple(child for row in updated.rows for child in row.contents)
    rejected = [child for child in hosted if not can_contain(updated.variant, child.variant)]
    if rejected:
        logger.debug(
            "replace_node noop: %s cannot host %s",
            updated.variant.value,
            rejected[0].variant.value,
        )
        return root
    if updated.variant not in ROWS_HOSTING_VARIANTS and updated.container is not None:
        updated = replace(updated, container=None)
    if updated.variant is NodeVariant.FORM:
        return normalize_rows(updated)
    location = locate(root, updated.id)
    if location is None:
        logger.debug("replace_node noop: id=%s not found", updated.id)
        return root
    if not can_contain(location.parent.variant, updated.variant):
        logger.debug(
            "replace_node noop: %s cannot host %s",
            location.parent.variant.value,
            updated.variant.value,
        )
        return root
    if updated.variant in ROWS_HOSTING_VARIANTS and updated.container is None:
        updated = replace(updated, container=Container())
    return normalize_rows(rebuild_path(root, location.path, lambda _node: updated))
