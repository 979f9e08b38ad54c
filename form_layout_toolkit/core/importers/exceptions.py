from __future__ import annotations

"""Importer exception classes.

Importers are the only layer that reports errors to the user: the editing
core treats every bad request as a no-op, but a malformed input document
cannot be turned into a valid tree and is rejected here.
"""

from pathlib import Path
from typing import Optional, Union

__all__ = ["LayoutImportError"]


class LayoutImportError(ValueError):
    """Raised when an input document cannot be normalised into a layout tree."""

    def __init__(self, message: str, source: Optional[Union[str, Path]] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.source = source
        self.cause = cause

    def __str__(self) -> str:
        if self.source:
            return f"[{self.source}] {super().__str__()}"
        return super().__str__()
