"""
Canonical traces for OpenAI exchanges.

Normalizes the raw request and response bodies of an OpenAI completion or
chat call into trace step builders, so callers can still attach trace ids,
sessions or timings before building the final step.
"""

import dataclasses
from typing import Optional, Sequence, Tuple, Union

from ...core.builders import (
    AITextTraceStepBuilder,
    ModelConfigBuilder,
    TextRequestBuilder,
    TextResponseBuilder,
)
from ...core.pricing import TextModelInfo, find_item_by_name_or_alias
from ...core.token_counter import TokenUsage
from ...core.types import (
    AITextChatRequest,
    AITextCompletionRequest,
    AITextRequestIdentity,
    ChatPromptItem,
    FunctionCall,
    TextFunction,
    TextResponseResult,
)
from .info import MODEL_INFO_OPENAI
from .stream import merge_chat_response_deltas, merge_completion_response_deltas
from .types import (
    OpenAIChatRequest,
    OpenAIChatResponse,
    OpenAICompletionRequest,
    OpenAICompletionResponse,
    OpenAIFunctionCall,
    OpenAIUsage,
)

PROVIDER_NAME = "openai"


def resolve_model_info(
    model: str,
    registry: Sequence[TextModelInfo] = MODEL_INFO_OPENAI
) -> TextModelInfo:
    """Resolve billing metadata for a model, keeping the requested name.

    Unknown models still get an info record carrying their name and
    provider.
    """
    info = find_item_by_name_or_alias(registry, model)
    if info is None:
        return TextModelInfo(name=model, provider=PROVIDER_NAME)
    return dataclasses.replace(info, name=model, provider=PROVIDER_NAME)


def _token_usage(usage: Optional[OpenAIUsage]) -> Optional[TokenUsage]:
    if usage is None:
        return None
    return TokenUsage(
        prompt_tokens=usage.prompt_tokens,
        completion_tokens=usage.completion_tokens,
        total_tokens=usage.total_tokens,
    )


def _function_calls(
    function_call: Optional[OpenAIFunctionCall]
) -> Optional[Tuple[FunctionCall, ...]]:
    if function_call is None or not function_call.name:
        return None
    return (FunctionCall(name=function_call.name, args=function_call.arguments),)


def _forced_function(
    function_call: Optional[Union[str, OpenAIFunctionCall]]
) -> Optional[str]:
    if isinstance(function_call, OpenAIFunctionCall):
        return function_call.name
    return function_call


def _model_config_builder(req: Union[OpenAICompletionRequest, OpenAIChatRequest]) -> ModelConfigBuilder:
    return (
        ModelConfigBuilder()
        .set_max_tokens(req.max_tokens)
        .set_temperature(req.temperature)
        .set_top_p(req.top_p)
        .set_n(req.n)
        .set_stream(req.stream)
        .set_presence_penalty(req.presence_penalty)
        .set_frequency_penalty(req.frequency_penalty)
        .set_logit_bias(req.logit_bias)
    )


def generate_completion_trace(
    request: str,
    response: Optional[str] = None,
    registry: Sequence[TextModelInfo] = MODEL_INFO_OPENAI,
) -> AITextTraceStepBuilder:
    """Build a trace step for an OpenAI completion exchange.

    Args:
        request: JSON body sent to the completions API
        response: JSON body received, or the raw event stream when the
            request asked for streaming; None while still in flight
        registry: Model metadata used to resolve the requested model

    Returns:
        A trace step builder with the request and, if given, response set

    Raises:
        ValueError: If the request or response does not match the schema
        StreamMergeError: If a streamed response holds no data chunks
    """
    req = OpenAICompletionRequest.model_validate_json(request)

    resp: Optional[OpenAICompletionResponse] = None
    if response:
        if req.stream:
            resp = merge_completion_response_deltas(response.split("\n"))
        else:
            resp = OpenAICompletionResponse.model_validate_json(response)

    model_config = (
        _model_config_builder(req)
        .set_logprobs(req.logprobs)
        .set_echo(req.echo)
        .set_best_of(req.best_of)
        .set_suffix(req.suffix)
        .build()
    )

    step = AITextTraceStepBuilder().set_request(
        TextRequestBuilder()
        .set_completion_step(
            AITextCompletionRequest(prompt=req.prompt),
            model_config,
            resolve_model_info(req.model, registry),
        )
        .set_identity(AITextRequestIdentity.from_values(req.user, req.organization))
    )

    if resp is not None:
        step.set_response(
            TextResponseBuilder()
            .set_model_usage(_token_usage(resp.usage))
            .set_results([
                TextResponseResult(
                    content=choice.text,
                    id=resp.id,
                    finish_reason=choice.finish_reason,
                )
                for choice in resp.choices
            ])
            .set_remote_id(resp.id)
        )

    return step


def generate_chat_trace(
    request: str,
    response: Optional[str] = None,
    registry: Sequence[TextModelInfo] = MODEL_INFO_OPENAI,
) -> AITextTraceStepBuilder:
    """Build a trace step for an OpenAI chat exchange.

    Args:
        request: JSON body sent to the chat completions API
        response: JSON body received, or the raw event stream when the
            request asked for streaming; None while still in flight
        registry: Model metadata used to resolve the requested model

    Returns:
        A trace step builder with the request and, if given, response set

    Raises:
        ValueError: If the request or response does not match the schema
        StreamMergeError: If a streamed response holds no data chunks
    """
    req = OpenAIChatRequest.model_validate_json(request)

    resp: Optional[OpenAIChatResponse] = None
    if response:
        if req.stream:
            resp = merge_chat_response_deltas(response.split("\n"))
        else:
            resp = OpenAIChatResponse.model_validate_json(response)

    chat_prompt = tuple(
        ChatPromptItem(
            content=message.content or "",
            role=message.role or "user",
            name=message.name,
            function_calls=_function_calls(message.function_call),
        )
        for message in req.messages
    )

    functions = None
    if req.functions is not None:
        functions = [
            TextFunction(name=f.name, description=f.description, parameters=f.parameters)
            for f in req.functions
        ]

    step = AITextTraceStepBuilder().set_request(
        TextRequestBuilder()
        .set_chat_step(
            AITextChatRequest(chat_prompt=chat_prompt),
            _model_config_builder(req).build(),
            resolve_model_info(req.model, registry),
        )
        .set_functions(functions)
        .set_function_call(_forced_function(req.function_call))
        .set_identity(AITextRequestIdentity.from_values(req.user, req.organization))
    )

    if resp is not None:
        step.set_response(
            TextResponseBuilder()
            .set_model_usage(_token_usage(resp.usage))
            .set_results([
                TextResponseResult(
                    content=choice.message.content or "",
                    id=str(choice.index),
                    role=choice.message.role,
                    name=choice.message.name,
                    function_calls=_function_calls(choice.message.function_call),
                    finish_reason=choice.finish_reason,
                )
                for choice in resp.choices
            ])
            .set_remote_id(resp.id)
        )

    return step
