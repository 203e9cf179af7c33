"""
Token usage reported by model providers.

Holds the exact counts a provider returned for one exchange.
"""

from pydantic.dataclasses import dataclass

from .serialization import RECORD_CONFIG


@dataclass(frozen=True, config=RECORD_CONFIG)
class TokenUsage:
    """Token usage data for one model call.

    All counts are taken from the provider as-is. ``total_tokens`` is
    trusted rather than recomputed, since some providers bill tokens that
    are not part of the prompt or the completion.
    """
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        """Validate token counts are non-negative."""
        if self.prompt_tokens < 0:
            raise ValueError("prompt_tokens cannot be negative")
        if self.completion_tokens < 0:
            raise ValueError("completion_tokens cannot be negative")
        if self.total_tokens < 0:
            raise ValueError("total_tokens cannot be negative")
