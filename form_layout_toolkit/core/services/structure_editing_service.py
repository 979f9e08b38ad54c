from __future__ import annotations

"""Service layer for structural edits on the layout being edited.

This module provides a UI-agnostic, testable service that wraps the pure
mutation engine (``core.mutations``) for stateful callers such as a tree
sidebar or a property panel.

Scope and guarantees:
- Operates purely in-memory on a LayoutContext, no file I/O nor UI imports.
- Every committed root goes through ``assign_missing_ids`` first.
- Invalid or stale requests return OperationResult(success=False, ...) and
  leave the context untouched; they never raise.
- The selection is cleared whenever the selected node leaves the tree.

Examples
--------
Basic usage:

    service = StructureEditingService()
    importer = JsonLayoutImporter()
    service.load(ctx, importer.import_file(path), importer.source_metadata(path))
    result = service.add_child(ctx, ctx.root.id, "TAB")
    if not result.success:
        print(result.message)

"""

from dataclasses import dataclass
import logging
from typing import Any, Callable, Dict, Optional, Union

from form_layout_toolkit.config import ConfigManager
from form_layout_toolkit.core import mutations
from form_layout_toolkit.core.identity import IdGenerator, assign_missing_ids, collect_ids
from form_layout_toolkit.core.models import LayoutContext, LayoutNode, NodeVariant, coerce_variant
from form_layout_toolkit.core.serialization import export_json
from form_layout_toolkit.core.tree_paths import node_at, path_to


__all__ = ["OperationResult", "StructureEditingService"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    """Result of a structural editing operation.

    Attributes
    ----------
    success
        Whether the operation changed the layout.
    message
        Human-readable summary suitable for logs or UI display.
    details
        Optional structured details for diagnostics or caller logic.
    """
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None


def _defaults_from_config(config: Dict[str, Any]) -> mutations.NodeDefaults:
    known = mutations.NodeDefaults.__dataclass_fields__
    return mutations.NodeDefaults(**{k: v for k, v in config.items() if k in known})


class StructureEditingService:
    """Encapsulates structural edit operations on a LayoutContext.

    Design principles:
    - No UI dependencies, no disk I/O.
    - No exceptions for expected invalid actions; return OperationResult.
    - The engine holds no state; the context always carries the latest root.

    Parameters
    ----------
    defaults
        Property values for created nodes. Read from ``editor.yml`` when omitted.
    generator
        Id generator shared by created and backfilled nodes.
    """

    def __init__(
        self,
        defaults: Optional[mutations.NodeDefaults] = None,
        generator: Optional[IdGenerator] = None,
    ) -> None:
        if defaults is None or generator is None:
            config = ConfigManager()
            if defaults is None:
                defaults = _defaults_from_config(config.get_node_defaults())
            if generator is None:
                generator = IdGenerator(prefix_length=config.get_id_settings().get("prefix_length", 5))
        self._defaults = defaults
        self._generator = generator

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def load(
        self,
        context: LayoutContext,
        root: LayoutNode,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> OperationResult:
        """Accept a root from an importer (or any external source).

        *metadata* (e.g. an importer's ``source_metadata``) replaces the
        context metadata of the previously loaded document.
        """
        if root.variant is not NodeVariant.FORM:
            logger.warning("Edit FAIL: load root_not_form variant=%s", root.variant.value)
            return OperationResult(False, "Root node must be a FORM.", {"variant": root.variant.value})
        self._commit(context, root)
        context.selected_id = None
        context.metadata = dict(metadata or {})
        logger.info("Edit OK: load form=%s tabs=%d", context.root.name, len(context.root.tabs))
        return OperationResult(True, f"Loaded '{context.root.name}'.", {"root_id": context.root.id})

    def select_node(self, context: LayoutContext, node_id: Optional[str]) -> OperationResult:
        """Set (or clear, with None) the selected node."""
        if node_id is None:
            context.selected_id = None
            return OperationResult(True, "Selection cleared.")
        if context.root is None or path_to(context.root, node_id) is None:
            return OperationResult(False, f"Node not found for id '{node_id}'.", {"node_id": node_id})
        context.selected_id = node_id
        return OperationResult(True, "Node selected.", {"node_id": node_id})

    def selected_node(self, context: LayoutContext) -> Optional[LayoutNode]:
        if context.root is None or not context.selected_id:
            return None
        path = path_to(context.root, context.selected_id)
        return node_at(context.root, path) if path is not None else None

    def add_child(
        self,
        context: LayoutContext,
        parent_id: str,
        child_variant: Union[NodeVariant, str],
    ) -> OperationResult:
        """Append a new node under *parent_id*; details carry the new id."""
        logger.info("Edit: add_child parent=%s variant=%s", parent_id, child_variant)
        if context.root is None:
            return self._missing_root()
        variant = coerce_variant(child_variant)
        new_root = mutations.add_child(context.root, parent_id, child_variant, self._defaults, self._generator)
        details: Dict[str, Any] = {"parent_id": parent_id, "variant": getattr(variant, "value", child_variant)}
        if new_root is context.root:
            logger.info("Edit noop: add_child parent=%s variant=%s", parent_id, child_variant)
            return OperationResult(False, "Cannot add this element here.", details)

        parent = node_at(new_root, path_to(new_root, parent_id))
        created = parent.tabs[-1] if parent.variant is NodeVariant.FORM else parent.rows[-1].contents[0]
        self._commit(context, new_root)
        details["node_id"] = created.id
        logger.info("Edit OK: add_child parent=%s node=%s", parent_id, created.id)
        return OperationResult(True, f"Added {created.variant.value}.", details)

    def delete_node(self, context: LayoutContext, node_id: str) -> OperationResult:
        """Delete *node_id* and its subtree."""
        logger.info("Edit: delete_node node=%s", node_id)
        return self._apply(
            context, "delete_node",
            lambda root: mutations.delete_node(root, node_id),
            "Deleted element.", "Element not found.", {"node_id": node_id},
        )

    def move_node(self, context: LayoutContext, active_id: str, over_id: str) -> OperationResult:
        """Apply a drop of *active_id* onto *over_id*."""
        logger.info("Edit: move_node active=%s over=%s", active_id, over_id)
        return self._apply(
            context, "move_node",
            lambda root: mutations.move_node(root, active_id, over_id),
            "Moved element.", "Cannot move element there.",
            {"active_id": active_id, "over_id": over_id},
        )

    def merge_with_previous(self, context: LayoutContext, node_id: str) -> OperationResult:
        """Merge *node_id* into the row above it."""
        logger.info("Edit: merge_with_previous node=%s", node_id)
        return self._apply(
            context, "merge_with_previous",
            lambda root: mutations.merge_with_previous(root, node_id),
            "Merged with row above.", "Cannot merge (first row or not found).", {"node_id": node_id},
        )

    def split_to_own_row(self, context: LayoutContext, node_id: str) -> OperationResult:
        """Move *node_id* to a new row of its own."""
        logger.info("Edit: split_to_own_row node=%s", node_id)
        return self._apply(
            context, "split_to_own_row",
            lambda root: mutations.split_to_own_row(root, node_id),
            "Moved to own row.", "Already alone in its row.", {"node_id": node_id},
        )

    def update_node(self, context: LayoutContext, updated: LayoutNode) -> OperationResult:
        """Commit a property edit; the edited node becomes the selection."""
        logger.info("Edit: update_node node=%s", updated.id)
        result = self._apply(
            context, "update_node",
            lambda root: mutations.replace_node(root, updated),
            "Updated element.", "Element not found.", {"node_id": updated.id},
        )
        if result.success:
            context.selected_id = context.root.id if updated.variant is NodeVariant.FORM else updated.id
        return result

    def export_json(self, context: LayoutContext, node_id: Optional[str] = None) -> Optional[str]:
        """Return the id-free JSON view of the root, or of *node_id* if given."""
        if context.root is None:
            return None
        node = context.root
        if node_id is not None:
            path = path_to(context.root, node_id)
            if path is None:
                return None
            node = node_at(context.root, path)
        return export_json(node)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _apply(
        self,
        context: LayoutContext,
        operation: str,
        edit: Callable[[LayoutNode], LayoutNode],
        ok_message: str,
        noop_message: str,
        details: Dict[str, Any],
    ) -> OperationResult:
        if context.root is None:
            return self._missing_root()
        new_root = edit(context.root)
        if new_root is context.root:
            logger.info("Edit noop: %s %s", operation, details)
            return OperationResult(False, noop_message, details)
        self._commit(context, new_root)
        logger.info("Edit OK: %s %s", operation, details)
        return OperationResult(True, ok_message, details)

    def _commit(self, context: LayoutContext, new_root: LayoutNode) -> None:
        context.root = assign_missing_ids(new_root, self._generator)
        if context.selected_id and context.selected_id not in collect_ids(context.root):
            logger.debug("Selection cleared: %s left the tree", context.selected_id)
            context.selected_id = None

    @staticmethod
    def _missing_root() -> OperationResult:
        return OperationResult(False, "No layout loaded in context.", {"reason": "missing_root"})
