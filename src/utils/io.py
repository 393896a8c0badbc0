"""
I/O Utilities

JSON file persistence shared by the stroke history, progress store and
sync queue.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def load_json(file_path: Path) -> Any:
    """Load JSON file."""
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def save_json(data: Any, file_path: Path, indent: int = 2):
    """
    Save data to JSON file.

    Writes to a uniquely named sibling temporary file first and renames it
    into place, so an interrupted write never leaves a truncated file behind
    and concurrent writers never share a temporary file.
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    f = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=file_path.parent,
        prefix=f".{file_path.name}.",
        suffix=".tmp",
        delete=False,
    )
    tmp_path = Path(f.name)
    try:
        with f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        os.replace(tmp_path, file_path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
