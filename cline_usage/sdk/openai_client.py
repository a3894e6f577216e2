"""
Tracked OpenAI client wrapper.

Records one usage entry per chat task without modifying behavior.
"""

from typing import Any, Dict, List, Optional

from openai import OpenAI

from ..core.recorder import UsageRecorder


class TrackedOpenAI:
    """OpenAI client wrapper that tracks each chat task in the usage log.

    API failures propagate unchanged. Tracking failures never do; the
    recorder logs them and the response is returned as usual.
    """

    def __init__(
        self,
        model: str,
        recorder: UsageRecorder,
        provider: str = "openai",
        user_id: Optional[str] = None,
        username: Optional[str] = None
    ):
        """Initialize tracked OpenAI client.

        Args:
            model: OpenAI model name (required)
            recorder: Recorder owned by the caller's composition root
            provider: Provider identifier written to each record
            user_id: Optional user identifier for every record
            username: Optional user name for every record

        Raises:
            ValueError: If model is missing/empty
        """
        if not model or not model.strip():
            raise ValueError("model is required and cannot be empty")

        self.model = model
        self.recorder = recorder
        self.provider = provider
        self.user_id = user_id
        self.username = username
        self.client = OpenAI()

    def chat(
        self,
        messages: List[Dict[str, str]],
        task_id: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs: Any
    ) -> Any:
        """Create chat completion and track it.

        Args:
            messages: List of message dictionaries (required)
            task_id: Identifier of the task this call belongs to
            temperature: Sampling temperature (optional)
            max_tokens: Maximum tokens to generate (optional)
            **kwargs: Additional OpenAI parameters

        Returns:
            OpenAI chat completion response

        Raises:
            ValueError: If messages is empty
            OpenAI API errors: Propagated without modification
        """
        if not messages:
            raise ValueError("messages is required and cannot be empty")

        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs
        )

        self.recorder.track(
            task_id=task_id,
            query=_last_user_message(messages),
            provider=self.provider,
            model=self.model,
            user_id=self.user_id,
            username=self.username
        )

        return response


def _last_user_message(messages: List[Dict[str, Any]]) -> str:
    """Text of the most recent user message, or an empty string."""
    for message in reversed(messages):
        if message.get("role") != "user":
            continue
        content = message.get("content")
        if isinstance(content, str):
            return content
        # Multi-part content: keep the text parts only
        if isinstance(content, list):
            return "\n".join(
                part.get("text", "") for part in content
                if isinstance(part, dict) and part.get("type") == "text"
            )
        return ""
    return ""
