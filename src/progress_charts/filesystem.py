"""
File access seam for Progress Charts.

PURPOSE: Keep disk I/O behind a small interface the payload store and
the exporters can share.
AI CONTEXT: Unit tests swap in an in-memory double instead of touching
tmp directories.

DESIGN:
- FileSystem is a structural Protocol, no base class needed
- RealFileSystem maps each call onto os / open()
- tests/conftest.py holds the in-memory MockFileSystem

USAGE:
    # Reading the real snapshot
    store = PayloadStore(filesystem=RealFileSystem())

    # In a test, with the conftest fixture
    store = PayloadStore(payload_path="/data/profile.json", filesystem=mock_fs)
"""

from __future__ import annotations

import os
from typing import Protocol

__all__ = ["FileSystem", "RealFileSystem"]


class FileSystem(Protocol):
    """
    The file operations Progress Charts performs.

    Only the operations the payload store and the chart export need:
    reading the payload snapshot and writing rendered SVG/PNG files.
    """

    def exists(self, path: str) -> bool:
        """
        Tell whether anything (file or directory) lives at path.

        Returns:
            False for missing paths; never raises.
        """
        ...

    def is_file(self, path: str) -> bool:
        """True only for regular files. Never raises."""
        ...

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create path along with any missing parents.

        Raises:
            OSError: path already exists and exist_ok is False.
        """
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """
        Return the whole file decoded as text.

        Raises:
            FileNotFoundError: Nothing at path.
        """
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """
        Replace the file's contents with content.

        Business context: Used to save rendered SVG charts from the CLI.

        Raises:
            PermissionError: The target cannot be written.
        """
        ...

    def write_bytes(self, path: str, content: bytes) -> None:
        """
        Replace the file's contents with raw bytes.

        Business context: Used to save PNG exports from the CLI.

        Raises:
            PermissionError: The target cannot be written.
        """
        ...


class RealFileSystem:
    """Disk-backed FileSystem; thin wrappers over os and open()."""

    def exists(self, path: str) -> bool:  # pragma: no cover
        return os.path.exists(path)

    def is_file(self, path: str) -> bool:  # pragma: no cover
        return os.path.isfile(path)

    def makedirs(self, path: str, exist_ok: bool = False) -> None:  # pragma: no cover
        os.makedirs(path, exist_ok=exist_ok)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:  # pragma: no cover
        """
        Load a payload or chart file from disk.

        Args:
            path: File to open.
            encoding: Decoding used for the bytes, utf-8 unless told otherwise.

        Returns:
            The decoded file body.

        Raises:
            FileNotFoundError: Nothing at path.
        """
        with open(path, encoding=encoding) as fh:
            return fh.read()

    def write_text(
        self, path: str, content: str, encoding: str = "utf-8"
    ) -> None:  # pragma: no cover
        with open(path, "w", encoding=encoding) as fh:
            fh.write(content)

    def write_bytes(self, path: str, content: bytes) -> None:  # pragma: no cover
        with open(path, "wb") as fh:
            fh.write(content)
