"""Basic file IO helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List

import yaml


def read_yaml_text(text: str) -> Any:
    """Parse a YAML document held in memory with the safe loader."""

    return yaml.safe_load(text)


def read_text_lines(path: Path) -> List[str]:
    """Return the file's UTF-8 lines, or an empty list if it is missing or empty.

    Undecodable bytes, e.g. in file names, become U+FFFD instead of failing.
    """

    if not path.is_file() or path.stat().st_size == 0:
        return []
    return path.read_text(encoding="utf-8", errors="replace").splitlines()


def write_json_text(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload, encoding="utf-8")
