"""
Pytest configuration and shared fixtures for Progress Charts tests.

This module contains:
- MockFileSystem: In-memory filesystem for testing without actual I/O
- Sample payload fixtures shaped like the profile API response
- Automatic reset of Config test overrides
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

import pytest

from progress_charts.config import Config
from progress_charts.storage import PayloadStore

PAYLOAD_PATH = "/data/profile.json"


class MockFileSystem:
    """
    In-memory file system for testing.

    Simulates a file system using dictionaries:
    - _files: dict mapping path -> content (str or bytes)
    - _dirs: set of directory paths
    - _read_only: paths whose writes raise PermissionError

    FEATURES:
    - No actual I/O operations
    - Easy to inspect state
    - Supports read-only simulation
    """

    def __init__(self) -> None:
        self._files: dict[str, str | bytes] = {}
        self._dirs: set[str] = set()
        self._read_only: set[str] = set()

    def exists(self, path: str) -> bool:
        return path in self._files or path in self._dirs

    def is_file(self, path: str) -> bool:
        return path in self._files

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create mock directory and parent directories.

        Raises:
            FileExistsError: If directory exists and exist_ok is False.
        """
        if path in self._dirs and not exist_ok:
            raise FileExistsError(path)
        parts = path.strip("/").split("/")
        for i in range(1, len(parts) + 1):
            self._dirs.add("/" + "/".join(parts[:i]))

    def read_text(self, path: str, _encoding: str = "utf-8") -> str:
        """
        Read mock file content.

        Raises:
            FileNotFoundError: If path is not a mock file.
        """
        if path not in self._files:
            raise FileNotFoundError(path)
        content = self._files[path]
        return content.decode("utf-8") if isinstance(content, bytes) else content

    def write_text(self, path: str, content: str, _encoding: str = "utf-8") -> None:
        """
        Write mock file content.

        Raises:
            PermissionError: If path was marked read-only.
        """
        if path in self._read_only:
            raise PermissionError(path)
        self._files[path] = content

    def write_bytes(self, path: str, content: bytes) -> None:
        if path in self._read_only:
            raise PermissionError(path)
        self._files[path] = content

    # Test helpers

    def set_file(self, path: str, content: str) -> None:
        self._files[path] = content

    def get_file(self, path: str) -> str | bytes | None:
        return self._files.get(path)

    def set_read_only(self, path: str) -> None:
        self._read_only.add(path)

    def list_files(self) -> list[str]:
        return sorted(self._files)


def make_payload() -> dict[str, Any]:
    """
    Build a profile API response with known totals.

    - 4 transactions over 3 days, listed out of calendar order
      (01/03, 03/03, 02/03 by first appearance); amounts sum to 3,750
    - 3 projects (grades 1, 1.2, 0) plus one non-project item
    - audits: 150,000 given, 100,000 received (ratio 1.50)

    Timestamps are at midday UTC so the local calendar day is the same
    in every zone within +/-11 hours.
    """
    return {
        "data": {
            "user": [{"id": 42, "login": "alice", "createdAt": "2023-09-01T12:00:00Z"}],
            "transactions": {
                "aggregate": {"sum": {"amount": 3750}},
                "nodes": [
                    {"amount": 500, "createdAt": "2025-03-01T11:00:00Z"},
                    {"amount": 250, "createdAt": "2025-03-01T13:00:00Z"},
                    {"amount": 1000, "createdAt": "2025-03-03T12:00:00Z"},
                    {"amount": 2000, "createdAt": "2025-03-02T12:00:00Z"},
                ],
            },
            "progress": [
                {"grade": 1, "object": {"type": "project"}},
                {"grade": 1.2, "object": {"type": "project"}},
                {"grade": 0, "object": {"type": "project"}},
                {"grade": 1, "object": {"type": "exercise"}},
            ],
            "audits": {
                "up": {"aggregate": {"sum": {"amount": 150000}}},
                "down": {"aggregate": {"sum": {"amount": 100000}}},
            },
        }
    }


@pytest.fixture(autouse=True)
def reset_config() -> Iterator[None]:
    """Clear Config test overrides after every test."""
    yield
    Config.reset_test_overrides()


@pytest.fixture
def mock_fs() -> MockFileSystem:
    """Empty in-memory filesystem."""
    return MockFileSystem()


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    return make_payload()


@pytest.fixture
def payload_fs(mock_fs: MockFileSystem, sample_payload: dict[str, Any]) -> MockFileSystem:
    """In-memory filesystem holding the sample payload at PAYLOAD_PATH."""
    mock_fs.set_file(PAYLOAD_PATH, json.dumps(sample_payload))
    return mock_fs


@pytest.fixture
def store(payload_fs: MockFileSystem) -> PayloadStore:
    """PayloadStore reading the sample payload."""
    return PayloadStore(payload_path=PAYLOAD_PATH, filesystem=payload_fs)


@pytest.fixture
def empty_store(mock_fs: MockFileSystem) -> PayloadStore:
    """PayloadStore pointing at a file that does not exist."""
    return PayloadStore(payload_path="/data/missing.json", filesystem=mock_fs)
