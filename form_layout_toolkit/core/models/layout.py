from __future__ import annotations

"""Immutable layout tree types.

A layout document is a rooted tree: a FORM holds an ordered tuple of TAB
nodes, and every other rows-hosting node owns a :class:`Container` whose
:class:`Row` entries group siblings rendered on one visual line.

All types are frozen dataclasses with tuple sequences so that a tree value
can be shared freely between the editing core and a renderer. Updates go
through :func:`dataclasses.replace` (see ``core.tree_paths.rebuild_path``).
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, FrozenSet, Mapping, Optional, Tuple, Union

__all__ = [
    "NodeVariant",
    "Scalar",
    "Container",
    "Row",
    "LayoutNode",
    "ALLOWED_CHILDREN",
    "ROWS_HOSTING_VARIANTS",
    "can_contain",
    "coerce_variant",
]


Scalar = Union[str, int, float, bool, None]


class NodeVariant(str, Enum):
    """Node kinds. Values are the wire names used in exported JSON."""

    FORM = "FORM"
    TAB = "TAB"
    SECTION = "SECTION"
    FIELD = "FIELD"
    SUBFORM = "SUBFORM"


ALLOWED_CHILDREN: Mapping[NodeVariant, FrozenSet[NodeVariant]] = {
    NodeVariant.FORM: frozenset({NodeVariant.TAB}),
    NodeVariant.TAB: frozenset({NodeVariant.SECTION}),
    NodeVariant.SECTION: frozenset({NodeVariant.FIELD, NodeVariant.SUBFORM, NodeVariant.SECTION}),
    NodeVariant.SUBFORM: frozenset({NodeVariant.FIELD}),
    NodeVariant.FIELD: frozenset(),
}

# Variants whose children live in container rows (FORM uses ``tabs``).
ROWS_HOSTING_VARIANTS: FrozenSet[NodeVariant] = frozenset(
    {NodeVariant.TAB, NodeVariant.SECTION, NodeVariant.SUBFORM}
)


def can_contain(parent: NodeVariant, child: NodeVariant) -> bool:
    """Return True if *parent* may directly host *child*."""
    return child in ALLOWED_CHILDREN.get(parent, frozenset())


def coerce_variant(value: Union[NodeVariant, str, None]) -> Optional[NodeVariant]:
    """Resolve a variant or its wire name (case-insensitive); None if unknown."""
    if isinstance(value, NodeVariant):
        return value
    if not isinstance(value, str):
        return None
    try:
        return NodeVariant(value.strip().upper())
    except ValueError:
        return None


@dataclass(frozen=True)
class Row:
    """Siblings rendered on one grid line. Never empty in an engine output."""

    contents: Tuple["LayoutNode", ...] = ()

    def __len__(self) -> int:
        return len(self.contents)


@dataclass(frozen=True)
class Container:
    """Row grouping owned by TAB, SECTION and SUBFORM nodes.

    ``width`` and ``cell_width`` are opaque rendering hints and are never
    interpreted here. ``extra`` keeps unknown keys read from JSON.
    """

    width: Optional[float] = None
    cell_width: Optional[float] = None
    rows: Tuple[Row, ...] = ()
    extra: Dict[str, Scalar] = field(default_factory=dict)

    def with_rows(self, rows: Tuple[Row, ...]) -> "Container":
        return replace(self, rows=tuple(rows))


@dataclass(frozen=True)
class LayoutNode:
    """A typed element of the layout tree.

    Attributes
    ----------
    id
        Opaque identifier, unique within a tree. ``None`` or ``""`` means the
        node still needs one (see ``core.identity``).
    name
        Display label, possibly blank.
    variant
        One of :class:`NodeVariant`.
    width, offset
        Grid span and offset; ``None`` when absent.
    container
        Row grouping for rows-hosting variants, ``None`` for FIELD and FORM.
    tabs
        Ordered TAB children, FORM only.
    extra
        Additional scalar properties, preserved verbatim through every edit.
    """

    name: str
    variant: NodeVariant
    id: Optional[str] = None
    width: Optional[int] = None
    offset: Optional[int] = None
    container: Optional[Container] = None
    tabs: Tuple["LayoutNode", ...] = ()
    extra: Dict[str, Scalar] = field(default_factory=dict)

    @property
    def has_id(self) -> bool:
        return bool(self.id)

    @property
    def rows(self) -> Tuple[Row, ...]:
        """Container rows, or an empty tuple when there is no container."""
        if self.container is None:
            return ()
        return self.container.rows

    def children(self) -> Tuple["LayoutNode", ...]:
        """Direct children in document order (tabs for FORM, row contents otherwise)."""
        if self.variant is NodeVariant.FORM:
            return self.tabs
        return tuple(child for row in self.rows for child in row.contents)

    def with_rows(self, rows: Tuple[Row, ...]) -> "LayoutNode":
        """Return a copy with new container rows, creating a bare container if needed."""
        container = self.container if self.container is not None else Container()
        return replace(self, container=container.with_rows(rows))

    def with_tabs(self, tabs: Tuple["LayoutNode", ...]) -> "LayoutNode":
        return replace(self, tabs=tuple(tabs))
