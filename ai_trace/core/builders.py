"""
Trace builders.

Step-by-step constructors for canonical trace records. Builders collect
fields into a private draft and produce a frozen snapshot on build().

Every setter ignores None, so a value that was already set is never
overwritten by "not provided". Builders are single use and not thread-safe.
"""

import dataclasses
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from .pricing import TextModelInfo
from .token_counter import TokenUsage
from .types import (
    AITextChatRequest,
    AITextCompletionRequest,
    AITextEmbedRequest,
    AITextRequestIdentity,
    AITextTraceStep,
    AITextTraceStepRequest,
    AITextTraceStepResponse,
    APIError,
    ChatPromptItem,
    ParsingError,
    TextFunction,
    TextModelConfig,
    TextResponseResult,
)


class _DraftBuilder:
    """Shared draft handling for builders."""

    def __init__(self) -> None:
        self._draft: Dict[str, Any] = {}

    def _set(self, name: str, value: Any) -> None:
        if value is not None:
            self._draft[name] = value


class ModelInfoBuilder(_DraftBuilder):
    """Builds a TextModelInfo."""

    def set_name(self, name: Optional[str]) -> "ModelInfoBuilder":
        self._set("name", name)
        return self

    def set_aliases(self, aliases: Optional[Iterable[str]]) -> "ModelInfoBuilder":
        self._set("aliases", tuple(aliases) if aliases is not None else None)
        return self

    def set_currency(self, currency: Optional[str]) -> "ModelInfoBuilder":
        self._set("currency", currency)
        return self

    def set_character_is_token(self, character_is_token: Optional[bool]) -> "ModelInfoBuilder":
        self._set("character_is_token", character_is_token)
        return self

    def set_prompt_token_cost_per_1m(self, cost: Optional[float]) -> "ModelInfoBuilder":
        self._set("prompt_token_cost_per_1m", cost)
        return self

    def set_completion_token_cost_per_1m(self, cost: Optional[float]) -> "ModelInfoBuilder":
        self._set("completion_token_cost_per_1m", cost)
        return self

    def set_provider(self, provider: Optional[str]) -> "ModelInfoBuilder":
        self._set("provider", provider)
        return self

    def build(self) -> TextModelInfo:
        """Build the model info.

        Raises:
            ValueError: If no name was set
        """
        if "name" not in self._draft:
            raise ValueError("Model name is required")
        return TextModelInfo(**self._draft)


class ModelConfigBuilder(_DraftBuilder):
    """Builds a TextModelConfig."""

    def set_max_tokens(self, max_tokens: Optional[int]) -> "ModelConfigBuilder":
        self._set("max_tokens", max_tokens)
        return self

    def set_temperature(self, temperature: Optional[float]) -> "ModelConfigBuilder":
        self._set("temperature", temperature)
        return self

    def set_top_p(self, top_p: Optional[float]) -> "ModelConfigBuilder":
        self._set("top_p", top_p)
        return self

    def set_top_k(self, top_k: Optional[int]) -> "ModelConfigBuilder":
        self._set("top_k", top_k)
        return self

    def set_n(self, n: Optional[int]) -> "ModelConfigBuilder":
        self._set("n", n)
        return self

    def set_stream(self, stream: Optional[bool]) -> "ModelConfigBuilder":
        self._set("stream", stream)
        return self

    def set_logprobs(self, logprobs: Optional[int]) -> "ModelConfigBuilder":
        self._set("logprobs", logprobs)
        return self

    def set_echo(self, echo: Optional[bool]) -> "ModelConfigBuilder":
        self._set("echo", echo)
        return self

    def set_presence_penalty(self, presence_penalty: Optional[float]) -> "ModelConfigBuilder":
        self._set("presence_penalty", presence_penalty)
        return self

    def set_frequency_penalty(self, frequency_penalty: Optional[float]) -> "ModelConfigBuilder":
        self._set("frequency_penalty", frequency_penalty)
        return self

    def set_best_of(self, best_of: Optional[int]) -> "ModelConfigBuilder":
        self._set("best_of", best_of)
        return self

    def set_logit_bias(self, logit_bias: Optional[Dict[str, float]]) -> "ModelConfigBuilder":
        self._set("logit_bias", dict(logit_bias) if logit_bias is not None else None)
        return self

    def set_suffix(self, suffix: Optional[str]) -> "ModelConfigBuilder":
        self._set("suffix", suffix)
        return self

    def build(self) -> TextModelConfig:
        return TextModelConfig(**self._draft)


class TextResponseBuilder(_DraftBuilder):
    """Builds the response half of a trace step."""

    def set_session_id(self, session_id: Optional[str]) -> "TextResponseBuilder":
        self._set("session_id", session_id)
        return self

    def set_results(self, results: Optional[Iterable[TextResponseResult]]) -> "TextResponseBuilder":
        self._set("results", tuple(results) if results is not None else None)
        return self

    def set_model_usage(self, model_usage: Optional[TokenUsage]) -> "TextResponseBuilder":
        self._set("model_usage", model_usage)
        return self

    def set_embed_model_usage(self, embed_model_usage: Optional[TokenUsage]) -> "TextResponseBuilder":
        self._set("embed_model_usage", embed_model_usage)
        return self

    def set_remote_id(self, remote_id: Optional[str]) -> "TextResponseBuilder":
        self._set("remote_id", remote_id)
        return self

    def set_model_response_time(self, model_response_time: Optional[float]) -> "TextResponseBuilder":
        self._set("model_response_time", model_response_time)
        return self

    def set_embed_model_response_time(self, embed_model_response_time: Optional[float]) -> "TextResponseBuilder":
        self._set("embed_model_response_time", embed_model_response_time)
        return self

    def set_parsing_error(self, parsing_error: Optional[ParsingError]) -> "TextResponseBuilder":
        self._set("parsing_error", parsing_error)
        return self

    def set_api_error(self, api_error: Optional[APIError]) -> "TextResponseBuilder":
        self._set("api_error", api_error)
        return self

    def build(self) -> AITextTraceStepResponse:
        return AITextTraceStepResponse(**self._draft)


class TextRequestBuilder(_DraftBuilder):
    """Builds the request half of a trace step.

    A step setter chooses the request variant. Values supplied with the
    request always win over the model config or info passed alongside it.
    """

    def __init__(self) -> None:
        super().__init__()
        self._kind: Optional[type] = None

    def _set_step(self, kind: type, req: AITextTraceStepRequest) -> None:
        # Fields set earlier survive unless the new request carries them
        draft = {
            item.name: getattr(req, item.name)
            for item in dataclasses.fields(req)
            if getattr(req, item.name) is not None
        }
        for name, value in self._draft.items():
            draft.setdefault(name, value)
        self._kind = kind
        self._draft = draft

    def set_completion_step(
        self,
        req: AITextCompletionRequest,
        model_config: Optional[TextModelConfig] = None,
        model_info: Optional[TextModelInfo] = None,
    ) -> "TextRequestBuilder":
        self._set_step(AITextCompletionRequest, req)
        if req.model_config is None:
            self._set("model_config", model_config)
        if req.model_info is None:
            self._set("model_info", model_info)
        return self

    def set_chat_step(
        self,
        req: AITextChatRequest,
        model_config: Optional[TextModelConfig] = None,
        model_info: Optional[TextModelInfo] = None,
    ) -> "TextRequestBuilder":
        self._set_step(AITextChatRequest, req)
        if req.model_config is None:
            self._set("model_config", model_config)
        if req.model_info is None:
            self._set("model_info", model_info)
        return self

    def set_embed_step(
        self,
        req: AITextEmbedRequest,
        model_info: Optional[TextModelInfo] = None,
    ) -> "TextRequestBuilder":
        self._set_step(AITextEmbedRequest, req)
        if req.embed_model_info is None:
            self._set("embed_model_info", model_info)
        return self

    def set_system_prompt(self, system_prompt: Optional[str]) -> "TextRequestBuilder":
        self._set("system_prompt", system_prompt)
        return self

    def add_chat(self, chat: ChatPromptItem) -> "TextRequestBuilder":
        if self._kind is None:
            self._kind = AITextChatRequest
        self._draft["chat_prompt"] = tuple(self._draft.get("chat_prompt", ())) + (chat,)
        return self

    def set_functions(self, functions: Optional[Iterable[TextFunction]]) -> "TextRequestBuilder":
        self._set("functions", tuple(functions) if functions is not None else None)
        return self

    def set_function_call(self, function_call: Optional[str]) -> "TextRequestBuilder":
        self._set("function_call", function_call)
        return self

    def set_identity(self, identity: Optional[AITextRequestIdentity]) -> "TextRequestBuilder":
        self._set("identity", identity)
        return self

    def build(self) -> AITextTraceStepRequest:
        """Build the request for the selected variant.

        Draft fields the variant does not define are left out.

        Raises:
            ValueError: If no request step was set
        """
        if self._kind is None:
            raise ValueError("Request step is not set")
        names = {item.name for item in dataclasses.fields(self._kind)}
        return self._kind(**{k: v for k, v in self._draft.items() if k in names})


class AITextTraceStepBuilder:
    """Builds a trace step from its request and response halves."""

    def __init__(self) -> None:
        self._created_at = datetime.now(timezone.utc)
        self._trace_id: Optional[str] = None
        self._session_id: Optional[str] = None
        self._request: Optional[AITextTraceStepRequest] = None
        self._response: Optional[AITextTraceStepResponse] = None

    @property
    def created_at(self) -> datetime:
        return self._created_at

    def set_trace_id(self, trace_id: Optional[str] = None) -> "AITextTraceStepBuilder":
        """Set the trace id, generating a random one if none is given."""
        if trace_id is not None:
            self._trace_id = trace_id
        elif self._trace_id is None:
            self._trace_id = str(uuid.uuid4())
        return self

    def set_session_id(self, session_id: Optional[str]) -> "AITextTraceStepBuilder":
        if session_id is not None:
            self._session_id = session_id
        return self

    def set_request(self, request: Optional[TextRequestBuilder]) -> "AITextTraceStepBuilder":
        if request is not None:
            self._request = request.build()
        return self

    def set_response(self, response: Optional[TextResponseBuilder]) -> "AITextTraceStepBuilder":
        if response is not None:
            self._response = response.build()
        return self

    def _patch_response(self, **changes: Any) -> None:
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return
        base = self._response or AITextTraceStepResponse()
        self._response = dataclasses.replace(base, **changes)

    def set_model_response_time(self, model_response_time: Optional[float]) -> "AITextTraceStepBuilder":
        self._patch_response(model_response_time=model_response_time)
        return self

    def set_api_error(self, api_error: Optional[APIError]) -> "AITextTraceStepBuilder":
        self._patch_response(api_error=api_error)
        return self

    def set_parsing_error(self, parsing_error: Optional[ParsingError]) -> "AITextTraceStepBuilder":
        self._patch_response(parsing_error=parsing_error)
        return self

    def is_stream(self) -> bool:
        """Whether the request asked the model to stream its response."""
        if self._request is None:
            return False
        if isinstance(self._request, AITextEmbedRequest):
            return False
        config = self._request.model_config
        return bool(config and config.stream)

    def build(self) -> AITextTraceStep:
        if self._trace_id is None:
            self.set_trace_id()
        return AITextTraceStep(
            trace_id=self._trace_id,
            created_at=self._created_at,
            session_id=self._session_id,
            request=self._request,
            response=self._response,
        )
