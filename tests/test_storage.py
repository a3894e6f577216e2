"""
Unit tests for storage layer.

Tests the record model, log file access and location helpers.
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from cline_usage.core.errors import ReadFailure, WriteFailure
from cline_usage.storage import paths
from cline_usage.storage.models import UsageRecord
from cline_usage.storage.repository import UsageLogFile


class TestUsageRecord:
    """Test record creation and JSON mapping."""

    def test_create_stamps_utc_milliseconds(self):
        """Verify timestamps use ISO-8601 UTC with millisecond precision."""
        now = datetime(2026, 10, 19, 8, 15, 30, 123456, tzinfo=timezone.utc)
        record = UsageRecord.create("task1", "hello", "openrouter", "gpt-4", "u1", "alice", now=now)

        assert record.timestamp == "2026-10-19T08:15:30.123Z"

    def test_create_substitutes_unknown(self):
        """Test missing user fields default to 'unknown'."""
        record = UsageRecord.create("task1", "hello", "openrouter", "gpt-4")

        assert record.user_id == "unknown"
        assert record.username == "unknown"

    def test_inputs_kept_as_is(self):
        """Test free text is not trimmed or validated."""
        record = UsageRecord.create("", "  multi\nline  ", "", "", "u1", "alice")

        assert record.query == "  multi\nline  "
        assert record.task_id == ""

    def test_to_dict_uses_log_keys(self):
        """Test the camelCase mapping matches the log file format."""
        record = UsageRecord.create("task1", "hello", "openrouter", "gpt-4", "u1", "alice")
        data = record.to_dict()

        assert list(data.keys()) == [
            "timestamp", "userId", "username", "query", "model", "provider", "taskId"
        ]
        assert data["userId"] == "u1"
        assert data["taskId"] == "task1"

    def test_record_is_immutable(self):
        """Test records cannot be modified after creation."""
        record = UsageRecord.create("task1", "hello", "openrouter", "gpt-4")
        with pytest.raises(AttributeError):
            record.query = "changed"


class TestUsageLogFile:
    """Test reading and writing the JSON array."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.temp_dir, "usage_log.json")
        self.log_file = UsageLogFile(self.path)

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_missing_file_reads_empty(self):
        assert not self.log_file.exists()
        assert self.log_file.read_records() == []

    def test_empty_file_reads_empty(self):
        Path(self.path).write_text("", encoding="utf-8")
        assert self.log_file.read_records() == []

    def test_whitespace_file_raises_read_failure(self):
        Path(self.path).write_text("  \n", encoding="utf-8")
        with pytest.raises(ReadFailure, match="Invalid JSON"):
            self.log_file.read_records()

    def test_deeply_nested_json_raises_read_failure(self):
        """Test nesting too deep for the parser is reported as a read failure."""
        Path(self.path).write_text("[" * 100000, encoding="utf-8")
        with pytest.raises(ReadFailure, match="Invalid JSON"):
            self.log_file.read_records()

    def test_write_then_read(self):
        """Test records are written in order and read back unchanged."""
        records = [{"taskId": "a"}, {"taskId": "b"}]
        self.log_file.write_records(records)

        assert self.log_file.read_records() == records
        assert Path(self.path).read_text(encoding="utf-8") == json.dumps(records, indent=2)

    def test_custom_indent(self):
        UsageLogFile(self.path, indent=4).write_records([{"taskId": "a"}])
        assert '\n    {' in Path(self.path).read_text(encoding="utf-8")

    def test_non_ascii_written_verbatim(self):
        self.log_file.write_records([{"query": "héllo"}])
        assert "héllo" in Path(self.path).read_text(encoding="utf-8")

    def test_invalid_json_raises_read_failure(self):
        Path(self.path).write_text("[{", encoding="utf-8")
        with pytest.raises(ReadFailure, match="Invalid JSON"):
            self.log_file.read_records()

    def test_non_list_raises_read_failure(self):
        Path(self.path).write_text('{"a": 1}', encoding="utf-8")
        with pytest.raises(ReadFailure, match="must contain a JSON array"):
            self.log_file.read_records()

    def test_unreadable_path_raises_read_failure(self):
        os.mkdir(self.path)
        with pytest.raises(ReadFailure) as exc_info:
            self.log_file.read_records()
        assert exc_info.value.path == Path(self.path)

    def test_write_error_raises_write_failure(self):
        """Test OS errors are wrapped with the original as cause."""
        with patch.object(Path, "write_bytes", side_effect=OSError("disk full")):
            with pytest.raises(WriteFailure, match="disk full") as exc_info:
                self.log_file.write_records([{"taskId": "a"}])
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_unencodable_text_keeps_previous_file(self):
        """Test a record that cannot be encoded leaves the old log intact."""
        self.log_file.write_records([{"taskId": "a"}])
        before = Path(self.path).read_bytes()

        with pytest.raises(WriteFailure):
            self.log_file.write_records([{"taskId": "a"}, {"query": "bad \udcff bytes"}])

        assert Path(self.path).read_bytes() == before
        assert os.listdir(self.temp_dir) == ["usage_log.json"]

    def test_replace_failure_keeps_previous_file(self):
        """Test a failed move over the log keeps it and removes the temp file."""
        self.log_file.write_records([{"taskId": "a"}])

        with patch("cline_usage.storage.repository.os.replace", side_effect=OSError("busy")):
            with pytest.raises(WriteFailure, match="busy"):
                self.log_file.write_records([{"taskId": "a"}, {"taskId": "b"}])

        assert self.log_file.read_records() == [{"taskId": "a"}]
        assert os.listdir(self.temp_dir) == ["usage_log.json"]

    def test_write_into_missing_directory_raises_write_failure(self):
        log_file = UsageLogFile(os.path.join(self.temp_dir, "missing", "usage_log.json"))
        with pytest.raises(WriteFailure):
            log_file.write_records([])


class TestPaths:
    """Test documents directory resolution and directory helpers."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_xdg_documents_dir_wins_on_linux(self):
        with patch.object(paths.sys, "platform", "linux"):
            result = paths.resolve_documents_path({"XDG_DOCUMENTS_DIR": self.temp_dir})
        assert result == Path(self.temp_dir)

    def test_xdg_documents_dir_expands_home(self):
        with patch.object(paths.sys, "platform", "linux"):
            result = paths.resolve_documents_path({"XDG_DOCUMENTS_DIR": "$HOME/Docs"})
        assert result == Path.home() / "Docs"

    def test_xdg_user_dir_tool_is_used(self):
        with patch.object(paths.sys, "platform", "linux"), \
                patch.object(paths.shutil, "which", return_value="/usr/bin/xdg-user-dir"), \
                patch.object(paths.subprocess, "run",
                             return_value=Mock(stdout=f"{self.temp_dir}\n")) as mock_run:
            result = paths.resolve_documents_path({})

        assert result == Path(self.temp_dir)
        assert mock_run.call_args[0][0] == ["/usr/bin/xdg-user-dir", "DOCUMENTS"]

    def test_xdg_user_dir_returning_home_falls_back(self):
        with patch.object(paths.sys, "platform", "linux"), \
                patch.object(paths.shutil, "which", return_value="/usr/bin/xdg-user-dir"), \
                patch.object(paths.subprocess, "run", return_value=Mock(stdout=str(Path.home()))):
            result = paths.resolve_documents_path({})

        assert result == Path.home() / "Documents"

    def test_linux_fallback_without_tool(self):
        with patch.object(paths.sys, "platform", "linux"), \
                patch.object(paths.shutil, "which", return_value=None):
            result = paths.resolve_documents_path({})

        assert result == Path.home() / "Documents"

    @pytest.mark.parametrize("platform", ["win32", "darwin"])
    def test_windows_and_macos_use_home_documents(self, platform):
        with patch.object(paths.sys, "platform", platform):
            result = paths.resolve_documents_path({"XDG_DOCUMENTS_DIR": self.temp_dir})

        assert result == Path.home() / "Documents"

    def test_path_exists(self):
        assert paths.path_exists(self.temp_dir)
        assert not paths.path_exists(os.path.join(self.temp_dir, "nope"))

    def test_path_exists_never_raises(self):
        with patch.object(Path, "exists", side_effect=PermissionError("denied")):
            assert paths.path_exists(self.temp_dir) is False

    def test_create_directory_recursive_is_idempotent(self):
        target = os.path.join(self.temp_dir, "a", "b", "c")
        paths.create_directory_recursive(target)
        paths.create_directory_recursive(target)

        assert os.path.isdir(target)
