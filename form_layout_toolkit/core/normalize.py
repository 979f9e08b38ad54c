from __future__ import annotations

"""Row normalizer: prune rows left empty by an edit."""

from typing import List

from form_layout_toolkit.core.models import LayoutNode, NodeVariant, Row

__all__ = ["normalize_rows"]


def normalize_rows(root: LayoutNode) -> LayoutNode:
    """Remove every empty row in every container of the tree.

    Untouched subtrees are returned by reference, so a tree without empty
    rows comes back as the same object.
    """
    if root.variant is NodeVariant.FORM:
        tabs = tuple(normalize_rows(tab) for tab in root.tabs)
        if all(new is old for new, old in zip(tabs, root.tabs)):
            return root
        return root.with_tabs(tabs)

    if root.container is None:
        return root

    rows: List[Row] = []
    changed = False
    for row in root.rows:
        if not row.contents:
            changed = True
            continue
        contents = tuple(normalize_rows(child) for child in row.contents)
        if all(new is old for new, old in zip(contents, row.contents)):
            rows.append(row)
        else:
            rows.append(Row(contents=contents))
            changed = True
    if not changed:
        return root
    return root.with_rows(tuple(rows))
