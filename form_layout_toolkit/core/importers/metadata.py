"""Context metadata recorded for an imported document."""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Union

__all__ = ["source_metadata"]


def source_metadata(file_path: Union[str, Path], source_type: str) -> Dict[str, Any]:
    """Describe where a layout came from, for ``LayoutContext.metadata``."""
    path = Path(file_path)
    return {
        "source_file": str(path),
        "source_name": path.stem,
        "source_type": source_type,
        "import_timestamp": datetime.now().isoformat(),
    }
