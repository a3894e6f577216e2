"""
Cline usage log.

Appends one JSON record per task to `<documents>/Cline/usage_log.json`.
"""

from .core.recorder import UsageRecorder, get_recorder
from .storage.models import UsageRecord

__all__ = ["UsageRecorder", "UsageRecord", "get_recorder"]
