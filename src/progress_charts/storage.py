"""
Payload storage for Progress Charts.

PURPOSE: Load the profile payload snapshot and save rendered artifacts.
AI CONTEXT: All file I/O goes through this module.

PAYLOAD:
    profile.json   # GraphQL response, with or without the {"data": ...} envelope

ERROR HANDLING STRATEGY:
- File not found: Return empty payload
- JSON corruption: Log error, return empty payload
- Write failure: Log error, return False
- Charts render their "no data" placeholders when the payload is empty

USAGE:
    # Production
    store = PayloadStore()

    # Testing with MockFileSystem
    store = PayloadStore(payload_path="/data/profile.json", filesystem=mock_fs)
"""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, Any

from .aggregation import (
    extract_graded_items,
    extract_point_events,
    extract_ratio_pair,
    unwrap_payload,
)
from .config import Config
from .filesystem import RealFileSystem
from .models import GradedItem, PointEvent, RatioPair

if TYPE_CHECKING:
    from .filesystem import FileSystem

logger = logging.getLogger(__name__)


class PayloadStore:
    """
    Read-mostly access to one payload snapshot.

    DESIGN PRINCIPLES:
    1. Fail-safe: Never raise on I/O or parse errors
    2. Predictable: Always return valid data structures
    3. Fresh: Each load re-reads the file, so a replaced snapshot is
       picked up without a restart
    4. Testable: FileSystem can be injected for mocking
    """

    def __init__(
        self,
        payload_path: str | None = None,
        filesystem: FileSystem | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            payload_path: Payload JSON path. Default: Config.get_payload_path()
            filesystem: FileSystem implementation. Default: RealFileSystem
        """
        self.payload_path = payload_path or Config.get_payload_path()
        self._fs: FileSystem = filesystem or RealFileSystem()
        logger.info(f"Payload store initialized: {self.payload_path}")

    def _read_json(self, file_path: str, default: Any) -> Any:
        """
        Read JSON file with error handling.

        Args:
            file_path: Path to JSON file
            default: Value to return on any error

        Returns:
            Parsed JSON data or default value.
        """
        try:
            content = self._fs.read_text(file_path)
            return json.loads(content)
        except FileNotFoundError:
            logger.warning(f"Payload not found: {file_path}")
            return default
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {file_path}: {e}")
            return default
        except OSError as e:
            logger.error(f"Error reading {file_path}: {e}")
            return default

    # =========================================================================
    # PAYLOAD OPERATIONS
    # =========================================================================

    def load_payload(self) -> dict[str, Any]:
        """
        Load the payload's data object.

        Returns:
            The unwrapped data mapping. Empty dict if unavailable or if
            the file does not hold a JSON object.
        """
        return unwrap_payload(self._read_json(self.payload_path, {}))

    def load_events(self) -> list[PointEvent]:
        """Transactions as PointEvents, in payload order."""
        return extract_point_events(self.load_payload())

    def load_graded_items(self) -> list[GradedItem]:
        return extract_graded_items(self.load_payload())

    def load_ratio_pair(self) -> RatioPair:
        return extract_ratio_pair(self.load_payload())

    # =========================================================================
    # ARTIFACT OPERATIONS
    # =========================================================================

    def save_artifact(self, file_path: str, content: str | bytes) -> bool:
        """
        Write a rendered chart (SVG text or PNG bytes) to disk.

        Creates the parent directory when needed.

        Args:
            file_path: Destination path
            content: SVG markup or PNG bytes

        Returns:
            True on success, False on failure (logged).
        """
        try:
            parent = os.path.dirname(file_path)
            if parent and not self._fs.exists(parent):
                self._fs.makedirs(parent, exist_ok=True)
            if isinstance(content, bytes):
                self._fs.write_bytes(file_path, content)
            else:
                self._fs.write_text(file_path, content)
            return True
        except OSError as e:
            logger.error(f"Error writing {file_path}: {e}")
            return False
