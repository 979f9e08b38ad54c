from __future__ import annotations

"""High-level orchestration services.

Services are instantiated directly and operate on a LayoutContext.
"""

from .structure_editing_service import OperationResult, StructureEditingService  # noqa: F401

__all__: list[str] = [
    "OperationResult",
    "StructureEditingService",
]
