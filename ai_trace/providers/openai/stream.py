"""
Merging of OpenAI streamed responses.

Turns the server-sent event lines of a streamed chat or completion call
into the response the non-streamed API would have returned.
"""

import logging
from typing import Iterable, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ...core.streaming import (
    FieldPolicy,
    StreamDecodeError,
    StreamMergeError,
    merge_choice_deltas,
    parse_stream,
)
from .types import (
    OpenAIChatChoice,
    OpenAIChatMessage,
    OpenAIChatResponse,
    OpenAIChatResponseDelta,
    OpenAICompletionChoice,
    OpenAICompletionResponse,
    OpenAICompletionResponseDelta,
    OpenAIFunctionCall,
)

logger = logging.getLogger(__name__)

CHAT_DELTA_POLICY = {
    "content": FieldPolicy.CONCAT,
    "role": FieldPolicy.FIRST_NON_EMPTY,
    "finish_reason": FieldPolicy.FIRST_NON_EMPTY,
    "function_name": FieldPolicy.FIRST_NON_EMPTY,
    "function_arguments": FieldPolicy.CONCAT,
}

COMPLETION_DELTA_POLICY = {
    "text": FieldPolicy.CONCAT,
    "finish_reason": FieldPolicy.FIRST_NON_EMPTY,
    "logprobs": FieldPolicy.FIRST_NON_EMPTY,
}

ChunkT = TypeVar("ChunkT", bound=BaseModel)


def _decode_chunks(lines: Iterable[str], schema: Type[ChunkT]) -> List[ChunkT]:
    chunks = []
    for payload in parse_stream(lines):
        try:
            chunks.append(schema.model_validate_json(payload))
        except ValidationError as e:
            raise StreamDecodeError(f"Invalid stream payload {payload!r}: {e}") from e

    if not chunks:
        raise StreamMergeError("No data chunks found")

    logger.debug("Decoded %d %s chunks", len(chunks), schema.__name__)
    return chunks


def merge_chat_response_deltas(lines: Iterable[str]) -> OpenAIChatResponse:
    """Merge streamed chat chunks into one chat response.

    The envelope (id, object, created, model, usage) is taken from the
    last chunk, where cumulative usage is reported.

    Args:
        lines: Raw event lines of one streamed exchange

    Returns:
        The merged OpenAIChatResponse

    Raises:
        StreamMergeError: If the stream holds no data chunks
        StreamDecodeError: If a chunk does not match the chat chunk schema
    """
    chunks = _decode_chunks(lines, OpenAIChatResponseDelta)

    deltas = []
    for chunk in chunks:
        for choice in chunk.choices:
            function_call = choice.delta.function_call or OpenAIFunctionCall()
            deltas.append((choice.index, {
                "content": choice.delta.content,
                "role": choice.delta.role,
                "finish_reason": choice.finish_reason,
                "function_name": function_call.name,
                "function_arguments": function_call.arguments,
            }))

    merged = merge_choice_deltas(deltas, CHAT_DELTA_POLICY)
    last = chunks[-1]

    choices = []
    for index, fields in merged.items():
        function_call = None
        if fields["function_name"]:
            function_call = OpenAIFunctionCall(
                name=fields["function_name"],
                arguments=fields["function_arguments"],
            )
        choices.append(OpenAIChatChoice(
            index=index,
            message=OpenAIChatMessage(
                role=fields["role"],
                content=fields["content"],
                function_call=function_call,
            ),
            finish_reason=fields["finish_reason"],
        ))

    return OpenAIChatResponse(
        id=last.id,
        object=last.object,
        created=last.created,
        model=last.model,
        choices=choices,
        usage=last.usage,
    )


def merge_completion_response_deltas(lines: Iterable[str]) -> OpenAICompletionResponse:
    """Merge streamed completion chunks into one completion response.

    Logprobs are kept from the first chunk that carries them for each
    choice.

    Raises:
        StreamMergeError: If the stream holds no data chunks
        StreamDecodeError: If a chunk does not match the completion chunk schema
    """
    chunks = _decode_chunks(lines, OpenAICompletionResponseDelta)

    deltas = []
    for chunk in chunks:
        for choice in chunk.choices:
            deltas.append((choice.index, {
                "text": choice.text,
                "finish_reason": choice.finish_reason,
                "logprobs": choice.logprobs,
            }))

    merged = merge_choice_deltas(deltas, COMPLETION_DELTA_POLICY)
    last = chunks[-1]

    return OpenAICompletionResponse(
        id=last.id,
        object=last.object,
        created=last.created,
        model=last.model,
        choices=[
            OpenAICompletionChoice(
                index=index,
                text=fields["text"],
                logprobs=fields["logprobs"],
                finish_reason=fields["finish_reason"],
            )
            for index, fields in merged.items()
        ],
        usage=last.usage,
    )
