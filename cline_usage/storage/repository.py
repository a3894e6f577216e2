"""
Repository for the usage log file.

Handles reading and rewriting the JSON array of usage records.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Union

from ..core.errors import ReadFailure, WriteFailure
from .paths import path_exists


class UsageLogFile:
    """Access to one usage log file.

    The file holds a single pretty-printed JSON array. It is always read in
    full and rewritten in full; there is no incremental append.
    """

    def __init__(self, path: Union[str, Path], indent: int = 2):
        """Initialize the repository with a log file path.

        Args:
            path: Path to the JSON log file
            indent: Indentation used when writing the file
        """
        self.path = Path(path)
        self.indent = indent

    def exists(self) -> bool:
        return path_exists(self.path)

    def read_records(self) -> List[Dict[str, Any]]:
        """Load every record currently in the file.

        Returns:
            Records in file order, or an empty list if the file is missing or empty

        Raises:
            ReadFailure: If the file cannot be read, is not valid JSON,
                or does not hold a JSON array
        """
        if not self.exists():
            return []

        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ReadFailure(f"Could not read usage log {self.path}: {e}", self.path) from e

        if not content:
            return []

        try:
            records = json.loads(content)
        except (json.JSONDecodeError, RecursionError) as e:
            raise ReadFailure(f"Invalid JSON in usage log {self.path}: {e}", self.path) from e

        if not isinstance(records, list):
            raise ReadFailure(
                f"Usage log {self.path} must contain a JSON array, got {type(records).__name__}",
                self.path
            )
        return records

    def write_records(self, records: List[Dict[str, Any]]) -> None:
        """Overwrite the file with the given records.

        The new content is encoded in full and written to a sibling temp
        file first, then moved over the log. A failed write leaves the
        previous file untouched.

        Args:
            records: Full record sequence to persist

        Raises:
            WriteFailure: If serialization or the write fails
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            data = json.dumps(records, indent=self.indent, ensure_ascii=False).encode("utf-8")
            tmp_path.write_bytes(data)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError, RecursionError) as e:
            _remove_quietly(tmp_path)
            raise WriteFailure(f"Could not write usage log {self.path}: {e}", self.path) from e


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except OSError:
        pass
