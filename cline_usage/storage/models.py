"""
Data models for storage layer.

Defines the usage record persisted to the usage log.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional


UNKNOWN = "unknown"


def _utc_timestamp(now: Optional[datetime] = None) -> str:
    """Format a UTC ISO-8601 timestamp with millisecond precision and 'Z' suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class UsageRecord:
    """One logged task invocation: who ran it, with which query, model and provider.

    Records are never modified after creation. The JSON form uses the
    camelCase keys of the log file.
    """
    timestamp: str
    user_id: str
    username: str
    query: str
    model: str
    provider: str
    task_id: str

    @classmethod
    def create(
        cls,
        task_id: str,
        query: str,
        provider: str,
        model: str,
        user_id: Optional[str] = None,
        username: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> "UsageRecord":
        """Build a record stamped with the current time.

        Missing or empty user_id/username are replaced with "unknown".
        """
        return cls(
            timestamp=_utc_timestamp(now),
            user_id=user_id or UNKNOWN,
            username=username or UNKNOWN,
            query=query,
            model=model,
            provider=provider,
            task_id=task_id
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "timestamp": self.timestamp,
            "userId": self.user_id,
            "username": self.username,
            "query": self.query,
            "model": self.model,
            "provider": self.provider,
            "taskId": self.task_id,
        }

