from __future__ import annotations

"""Stable node identifiers.

Ids are a random per-session prefix followed by a process-monotonic counter
in base 36 (``"k3f9a-1z"``). Within one session they are unique by
construction; across sessions they are only probabilistically unique, since
the prefix is random and not collision-proof.

:func:`assign_missing_ids` backfills ids on trees coming from importers and
is re-applied to every root the editing service commits.
"""

import itertools
import logging
import secrets
import threading
from dataclasses import replace
from typing import Optional, Set

from form_layout_toolkit.core.models import LayoutNode, NodeVariant, Row
from form_layout_toolkit.core.tree_paths import iter_nodes

__all__ = ["IdGenerator", "assign_missing_ids", "default_generator", "collect_ids"]

logger = logging.getLogger(__name__)

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


class IdGenerator:
    """Produce ids that never repeat within this generator's lifetime.

    Parameters
    ----------
    prefix
        Session prefix. A random base-36 string is drawn when omitted.
    prefix_length
        Length of the random prefix, clamped to at least 3.
    """

    def __init__(self, prefix: Optional[str] = None, prefix_length: int = 5) -> None:
        if prefix is None:
            length = max(3, int(prefix_length))
            prefix = "".join(secrets.choice(_ALPHABET) for _ in range(length))
        self._prefix = prefix
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def prefix(self) -> str:
        return self._prefix

    def next_id(self, taken: Optional[Set[str]] = None) -> str:
        """Return a fresh id, skipping any value present in *taken*."""
        while True:
            with self._lock:
                n = next(self._counter)
            candidate = f"{self._prefix}-{_base36(n)}"
            if not taken or candidate not in taken:
                return candidate


_default_generator: Optional[IdGenerator] = None


def default_generator() -> IdGenerator:
    """Return the process-wide generator, creating it on first use."""
    global _default_generator
    if _default_generator is None:
        _default_generator = IdGenerator()
    return _default_generator


def collect_ids(root: LayoutNode) -> Set[str]:
    """Return every non-empty id present in the tree."""
    return {node.id for node in iter_nodes(root) if node.id}


def assign_missing_ids(root: LayoutNode, generator: Optional[IdGenerator] = None) -> LayoutNode:
    """Give every id-less node a fresh id; leave existing ids untouched.

    Idempotent: a tree whose nodes all have ids is returned as the same
    object. Only nodes on a path to a backfilled node are rebuilt.
    """
    gen = generator or default_generator()
    taken = collect_ids(root)
    assigned = 0

    def visit(node: LayoutNode) -> LayoutNode:
        nonlocal assigned
        updated = node
        if not node.id:
            new_id = gen.next_id(taken)
            taken.add(new_id)
            assigned += 1
            updated = replace(updated, id=new_id)

        if node.variant is NodeVariant.FORM:
            tabs = tuple(visit(tab) for tab in node.tabs)
            if any(new is not old for new, old in zip(tabs, node.tabs)):
                updated = updated.with_tabs(tabs)
            return updated

        if node.container is None:
            return updated
        rows = []
        changed = False
        for row in node.rows:
            contents = tuple(visit(child) for child in row.contents)
            if any(new is not old for new, old in zip(contents, row.contents)):
                rows.append(Row(contents=contents))
                changed = True
            else:
                rows.append(row)
        if changed:
            updated = updated.with_rows(tuple(rows))
        return updated

    result = visit(root)
    if assigned:
        logger.debug("assign_missing_ids: assigned=%d", assigned)
    return result
