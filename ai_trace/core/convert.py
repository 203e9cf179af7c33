"""
Conversions between canonical request shapes.
"""

import re
from typing import Optional

from .types import (
    AITextChatRequest,
    AITextCompletionRequest,
    ChatPromptItem,
    FunctionCall,
    TextResponseResult,
)


def convert_to_chat_request(req: AITextCompletionRequest) -> AITextChatRequest:
    """Turn a completion request into a chat request.

    A ``system`` entry is prepended when the request has a system prompt,
    followed by a single ``user`` entry holding the prompt.

    Raises:
        ValueError: If the prompt is empty
    """
    if not req.prompt:
        raise ValueError("Prompt is required")

    chat_prompt = []
    if req.system_prompt:
        chat_prompt.append(ChatPromptItem(content=req.system_prompt, role="system"))
    chat_prompt.append(ChatPromptItem(content=req.prompt, role="user"))

    return AITextChatRequest(
        chat_prompt=tuple(chat_prompt),
        model_config=req.model_config,
        model_info=req.model_info,
        function_call=req.function_call,
        identity=req.identity,
    )


def convert_to_completion_request(req: AITextChatRequest) -> AITextCompletionRequest:
    """Turn a chat request into a completion request.

    All chat entries are joined with newlines into the prompt.

    Raises:
        ValueError: If the joined prompt is empty
    """
    prompt = "\n".join(item.content for item in req.chat_prompt)
    return AITextCompletionRequest(
        prompt=prompt,
        model_config=req.model_config,
        model_info=req.model_info,
        function_call=req.function_call,
        identity=req.identity,
    )


def convert_to_chat_prompt_item(result: TextResponseResult) -> ChatPromptItem:
    """Replay a response result as an assistant chat entry."""
    return ChatPromptItem(
        content=result.content,
        role="assistant",
        name=result.name,
        function_calls=result.function_calls,
    )


_FUNCTION_CALL_RE = re.compile(r"(\w+)\((.*)\)", re.DOTALL)


def parse_function(value: str) -> Optional[FunctionCall]:
    """Extract a ``name(args)`` function call written as text."""
    match = _FUNCTION_CALL_RE.search(value)
    if match is None:
        return None
    return FunctionCall(name=match.group(1).strip(), args=match.group(2).strip())
