"""Small helpers for file names, paths and binary files."""

from __future__ import annotations

import os
from pathlib import Path

EXTENSION_SEPARATOR = "."
_SEPARATORS = frozenset({"/", os.sep})


def get_filename_from_path(path: str) -> str:
    """Return the part of ``path`` after its last path separator.

    A separator in the very first position is not treated as one.
    """
    for index in range(len(path) - 1, 0, -1):
        if path[index] in _SEPARATORS:
            return path[index + 1:]
    return path


def remove_extension(path: str) -> str:
    """Strip the last extension from ``path``."""
    dot = path.rfind(EXTENSION_SEPARATOR)
    return path if dot < 0 else path[:dot]


def replace_extension(filename: str, new_ext: str) -> str:
    """Replace the last extension of ``filename`` with ``new_ext``."""
    separator = "" if new_ext.startswith(EXTENSION_SEPARATOR) else EXTENSION_SEPARATOR
    return f"{remove_extension(filename)}{separator}{new_ext}"


def replace_path(filename: str, new_path: str) -> str:
    """Put the file name of ``filename`` into directory ``new_path``."""
    separator = "" if new_path and new_path[-1] in _SEPARATORS else os.sep
    return f"{new_path}{separator}{get_filename_from_path(filename)}"


def get_path_without_filename(path: str) -> str:
    """Return the directory part of ``path`` including the trailing separator."""
    for index in range(len(path) - 1, 0, -1):
        if path[index] in _SEPARATORS:
            return path[:index + 1]
    return ""


def matches_extension(filename: str, extension: str) -> bool:
    """Return True when ``filename`` ends with ``extension``, ignoring case."""
    if len(filename) < len(extension):
        return False
    tail = filename[len(filename) - len(extension):]
    return tail.lower() == extension.lower()


def byte_to_binary(value: int) -> str:
    """Format the low byte of ``value`` as eight binary digits."""
    return format(value & 0xFF, "08b")


def read_file(filename: str) -> bytes:
    """Return the whole contents of ``filename``."""
    return Path(filename).read_bytes()


def write_file(filename: str, data: bytes) -> None:
    """Write ``data`` to ``filename``, replacing any existing file."""
    Path(filename).write_bytes(bytes(data))