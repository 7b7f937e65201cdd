"""Output file helpers."""

import json
from pathlib import Path
from typing import Any, Union


def ensure_parent(path: Union[str, Path]) -> Path:
    """Create the parent directory of `path` if needed."""
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    return path


def write_json(path: Union[str, Path], data: Any) -> Path:
    """Write `data` as indented JSON; non-JSON values (dates etc.) become strings."""
    path = ensure_parent(path)
    path.write_text(json.dumps(data, indent=2, default=str, ensure_ascii=False), encoding="utf-8")
    return path


def write_text(path: Union[str, Path], text: str) -> Path:
    path = ensure_parent(path)
    path.write_text(text, encoding="utf-8")
    return path
