"""
Usage recording.

Appends one record per tracked task to the JSON usage log. Tracking is
best-effort: every failure is logged here and never reaches the caller.
"""

import logging
import threading
from pathlib import Path
from typing import Optional

from ..config.loader import RecorderConfig
from ..storage.models import UsageRecord
from ..storage.paths import create_directory_recursive, path_exists, resolve_documents_path
from ..storage.repository import UsageLogFile
from .errors import InitializationFailure, ReadFailure, WriteFailure

logger = logging.getLogger(__name__)


class UsageRecorder:
    """Appends usage records to `<documents>/Cline/usage_log.json`.

    The log location is resolved once, at construction. If that fails the
    recorder stays inert for the rest of the process and every `track` call
    only logs a warning.
    """

    def __init__(self, config: Optional[RecorderConfig] = None):
        self.config = config or RecorderConfig()
        self._log_file: Optional[UsageLogFile] = None
        self._lock = threading.Lock()
        self.initialize()

    @property
    def log_file(self) -> Optional[UsageLogFile]:
        return self._log_file

    @property
    def log_path(self) -> Optional[Path]:
        return self._log_file.path if self._log_file is not None else None

    @property
    def is_active(self) -> bool:
        return self._log_file is not None

    def initialize(self) -> None:
        """Resolve the log directory and create it if missing."""
        try:
            log_dir = self._prepare_log_dir()
        except InitializationFailure as e:
            logger.error("Failed to initialize usage recorder: %s", e, exc_info=e.__cause__)
            return

        self._log_file = UsageLogFile(log_dir / self.config.log_filename, indent=self.config.indent)
        logger.info("Usage log will be stored at: %s", self._log_file.path)

    def _prepare_log_dir(self) -> Path:
        try:
            if self.config.documents_dir is not None:
                documents_dir = Path(self.config.documents_dir)
            else:
                documents_dir = resolve_documents_path()
        except (OSError, RuntimeError, KeyError) as e:
            raise InitializationFailure(f"Could not resolve documents directory: {e}") from e

        log_dir = documents_dir / self.config.app_dir_name
        try:
            if not path_exists(log_dir):
                create_directory_recursive(log_dir)
        except OSError as e:
            raise InitializationFailure(f"Could not create {log_dir}: {e}", log_dir) from e
        return log_dir

    def track(
        self,
        task_id: str,
        query: str,
        provider: str,
        model: str,
        user_id: Optional[str] = None,
        username: Optional[str] = None
    ) -> None:
        """Record one task invocation.

        Missing user_id/username are stored as "unknown". Never raises.

        Args:
            task_id: Task identifier
            query: Free-text query that started the task
            provider: API provider identifier
            model: Model identifier
            user_id: Optional user identifier
            username: Optional user name
        """
        if self._log_file is None:
            logger.warning("Usage log path not initialized. Skipping usage tracking.")
            return

        record = UsageRecord.create(
            task_id=task_id,
            query=query,
            provider=provider,
            model=model,
            user_id=user_id,
            username=username
        )
        logger.debug("Tracking usage: %s", record.to_dict())

        with self._lock:
            records = self._load_records()
            records.append(record.to_dict())
            try:
                self._log_file.write_records(records)
            except WriteFailure as e:
                logger.error("Failed to write to usage log: %s", e, exc_info=e.__cause__)

    def _load_records(self) -> list:
        try:
            return self._log_file.read_records()
        except ReadFailure as e:
            logger.warning("Could not read or parse usage log file: %s", e)
            return []


# Shared recorder for callers without their own composition root
_default_recorder: Optional[UsageRecorder] = None
_default_lock = threading.Lock()


def get_recorder(config: Optional[RecorderConfig] = None) -> UsageRecorder:
    """Get the shared recorder instance.

    The first call builds it (from `config`, or defaults); later calls
    return the same instance and ignore `config`.

    Args:
        config: Configuration used only when the recorder is first created

    Returns:
        The process-wide UsageRecorder
    """
    global _default_recorder
    with _default_lock:
        if _default_recorder is None:
            _default_recorder = UsageRecorder(config)
        return _default_recorder
