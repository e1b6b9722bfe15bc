"""File helpers."""

from __future__ import annotations

import os
from pathlib import Path

PathLike = str | os.PathLike


def read_file_to_string(file_path: PathLike) -> str:
    """Return the file's contents, or an empty string if it cannot be opened."""
    try:
        handle = open(file_path, encoding="utf-8")
    except OSError:
        return ""
    with handle:
        return handle.read()


def read_lines(file_path: PathLike) -> list[str]:
    """Return the file's lines without their line endings.

    Raises OSError if the file cannot be read.
    """
    text = Path(file_path).read_text(encoding="utf-8")
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def create_and_write_to_file(content: str, file_path: PathLike) -> None:
    """Create (or truncate) the file and write content to it."""
    Path(file_path).write_text(content, encoding="utf-8")
    print(f"successfully wrote to {os.fspath(file_path)}")