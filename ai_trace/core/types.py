"""
Canonical trace data model.

Provider-agnostic request, response and trace step records that every
provider adapter normalizes into. Records are frozen pydantic dataclasses,
validated on construction and encoded by core.serialization.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union

from pydantic.dataclasses import dataclass

from .pricing import TextModelInfo
from .serialization import RECORD_CONFIG
from .token_counter import TokenUsage


@dataclass(frozen=True, config=RECORD_CONFIG)
class TextModelConfig:
    """Normalized sampling and decoding parameters.

    A field left as None means "provider default".
    """
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    n: Optional[int] = None
    stream: Optional[bool] = None
    logprobs: Optional[int] = None
    echo: Optional[bool] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    best_of: Optional[int] = None
    logit_bias: Optional[Dict[str, float]] = None
    suffix: Optional[str] = None


@dataclass(frozen=True, config=RECORD_CONFIG)
class AITextRequestIdentity:
    """Who a request was made on behalf of."""
    user: Optional[str] = None
    organization: Optional[str] = None

    @classmethod
    def from_values(
        cls,
        user: Optional[str] = None,
        organization: Optional[str] = None
    ) -> Optional["AITextRequestIdentity"]:
        """Build an identity only if user or organization is non-empty."""
        if not user and not organization:
            return None
        return cls(user=user or None, organization=organization or None)


@dataclass(frozen=True, config=RECORD_CONFIG)
class FunctionCall:
    """A function call emitted by a model or carried in a chat message."""
    name: str
    args: Optional[str] = None


@dataclass(frozen=True, config=RECORD_CONFIG)
class TextFunction:
    """A function definition offered to the model."""
    name: str
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None


@dataclass(frozen=True, config=RECORD_CONFIG)
class ChatPromptItem:
    """One entry of a chat prompt."""
    content: str
    role: str
    name: Optional[str] = None
    function_calls: Optional[Tuple[FunctionCall, ...]] = None


@dataclass(frozen=True, config=RECORD_CONFIG)
class AITextCompletionRequest:
    """A single-prompt completion request."""
    prompt: str
    system_prompt: Optional[str] = None
    model_config: Optional[TextModelConfig] = None
    model_info: Optional[TextModelInfo] = None
    function_call: Optional[str] = None
    identity: Optional[AITextRequestIdentity] = None

    def __post_init__(self):
        """Validate the prompt is present."""
        if not self.prompt:
            raise ValueError("Prompt is required")


@dataclass(frozen=True, config=RECORD_CONFIG)
class AITextChatRequest:
    """A chat request made of ordered prompt entries."""
    chat_prompt: Tuple[ChatPromptItem, ...] = ()
    functions: Optional[Tuple[TextFunction, ...]] = None
    model_config: Optional[TextModelConfig] = None
    model_info: Optional[TextModelInfo] = None
    function_call: Optional[str] = None
    identity: Optional[AITextRequestIdentity] = None


@dataclass(frozen=True, config=RECORD_CONFIG)
class AITextEmbedRequest:
    """An embedding request."""
    texts: Tuple[str, ...] = ()
    embed_model_config: Optional[TextModelConfig] = None
    embed_model_info: Optional[TextModelInfo] = None
    identity: Optional[AITextRequestIdentity] = None


AITextTraceStepRequest = Union[AITextCompletionRequest, AITextChatRequest, AITextEmbedRequest]


@dataclass(frozen=True, config=RECORD_CONFIG)
class TextResponseResult:
    """One candidate output of a model call."""
    content: str = ""
    id: Optional[str] = None
    role: Optional[str] = None
    name: Optional[str] = None
    function_calls: Optional[Tuple[FunctionCall, ...]] = None
    finish_reason: Optional[str] = None


@dataclass(frozen=True, config=RECORD_CONFIG)
class TextResponse:
    """Canonical response of a model call."""
    session_id: Optional[str] = None
    remote_id: Optional[str] = None
    results: Tuple[TextResponseResult, ...] = ()
    model_usage: Optional[TokenUsage] = None
    embed_model_usage: Optional[TokenUsage] = None


@dataclass(frozen=True, config=RECORD_CONFIG)
class ParsingError:
    """A model output that could not be parsed."""
    message: str
    value: Optional[str] = None


@dataclass(frozen=True, config=RECORD_CONFIG)
class APIError:
    """A failed provider API call."""
    message: str
    status: Optional[int] = None
    headers: Optional[Dict[str, str]] = None
    request: Optional[Any] = None
    body: Optional[Any] = None


@dataclass(frozen=True, config=RECORD_CONFIG)
class AITextTraceStepResponse(TextResponse):
    """Response half of a trace step, with timing and failure details."""
    model_response_time: Optional[float] = None  # milliseconds
    embed_model_response_time: Optional[float] = None  # milliseconds
    parsing_error: Optional[ParsingError] = None
    api_error: Optional[APIError] = None


@dataclass(frozen=True, config=RECORD_CONFIG)
class AITextTraceStep:
    """Canonical record of a single model invocation.

    The request and response halves are built independently; a step is
    only complete once both exist.
    """
    trace_id: str
    created_at: datetime
    session_id: Optional[str] = None
    request: Optional[AITextTraceStepRequest] = None
    response: Optional[AITextTraceStepResponse] = None

    @property
    def is_complete(self) -> bool:
        """Whether both the request and the response are present."""
        return self.request is not None and self.response is not None
