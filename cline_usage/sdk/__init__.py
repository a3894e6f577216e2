"""
SDK for Cline usage logging.

Provides client wrappers that record usage as they run.
"""

from .openai_client import TrackedOpenAI

__all__ = ["TrackedOpenAI"]
