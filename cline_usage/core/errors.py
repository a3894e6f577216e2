"""
Failure types for usage recording.

These never leave the recorder: each one is caught where it happens and
turned into a log entry.
"""


class UsageLogError(Exception):
    """Base class for usage log failures."""
    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class InitializationFailure(UsageLogError):
    """Raised when the documents directory cannot be resolved or the log directory created."""


class ReadFailure(UsageLogError):
    """Raised when an existing log file cannot be read or is not a JSON array."""


class WriteFailure(UsageLogError):
    """Raised when the log file cannot be rewritten."""
