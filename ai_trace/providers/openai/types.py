"""
OpenAI wire schemas.

Pydantic models for the request, response and streaming chunk payloads
exchanged with the OpenAI completion and chat APIs. Payloads are validated
against these models before they enter the canonical trace model.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class OpenAIUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class OpenAILogprob(BaseModel):
    tokens: Optional[List[str]] = None
    token_logprobs: Optional[List[Optional[float]]] = None
    top_logprobs: Optional[List[Optional[Dict[str, float]]]] = None
    text_offset: Optional[List[int]] = None


class OpenAIFunctionCall(BaseModel):
    name: Optional[str] = None
    arguments: Optional[str] = None


class OpenAIFunction(BaseModel):
    name: str
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None


class OpenAIChatMessage(BaseModel):
    role: Optional[str] = None
    content: Optional[str] = None
    name: Optional[str] = None
    function_call: Optional[OpenAIFunctionCall] = None


class _SamplingParams(BaseModel):
    model: str
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    n: Optional[int] = None
    stream: Optional[bool] = None
    stop: Optional[Union[str, List[str]]] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    logit_bias: Optional[Dict[str, float]] = None
    user: Optional[str] = None
    organization: Optional[str] = None


class OpenAICompletionRequest(_SamplingParams):
    prompt: str
    suffix: Optional[str] = None
    logprobs: Optional[int] = None
    echo: Optional[bool] = None
    best_of: Optional[int] = None


class OpenAIChatRequest(_SamplingParams):
    messages: List[OpenAIChatMessage]
    functions: Optional[List[OpenAIFunction]] = None
    function_call: Optional[Union[str, OpenAIFunctionCall]] = None


class _Envelope(BaseModel):
    id: str
    object: Optional[str] = None
    created: Optional[int] = None
    model: str
    usage: Optional[OpenAIUsage] = None


class OpenAICompletionChoice(BaseModel):
    index: int = 0
    text: str = ""
    logprobs: Optional[OpenAILogprob] = None
    finish_reason: Optional[str] = None


class OpenAICompletionResponse(_Envelope):
    choices: List[OpenAICompletionChoice] = Field(default_factory=list)


class OpenAIChatChoice(BaseModel):
    index: int = 0
    message: OpenAIChatMessage
    finish_reason: Optional[str] = None


class OpenAIChatResponse(_Envelope):
    choices: List[OpenAIChatChoice] = Field(default_factory=list)


class OpenAICompletionDeltaChoice(BaseModel):
    index: int
    text: Optional[str] = None
    logprobs: Optional[OpenAILogprob] = None
    finish_reason: Optional[str] = None


class OpenAICompletionResponseDelta(_Envelope):
    choices: List[OpenAICompletionDeltaChoice] = Field(default_factory=list)


class OpenAIChatDelta(BaseModel):
    role: Optional[str] = None
    content: Optional[str] = None
    function_call: Optional[OpenAIFunctionCall] = None


class OpenAIChatDeltaChoice(BaseModel):
    index: int
    delta: OpenAIChatDelta = Field(default_factory=OpenAIChatDelta)
    finish_reason: Optional[str] = None


class OpenAIChatResponseDelta(_Envelope):
    choices: List[OpenAIChatDeltaChoice] = Field(default_factory=list)
