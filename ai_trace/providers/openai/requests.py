"""
OpenAI request generation.

Maps normalized options onto OpenAI request bodies.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

MAX_STOP_SEQUENCES = 4


@dataclass(frozen=True)
class OpenAIOptions:
    """Options used to build OpenAI requests."""
    model: str = "gpt-3.5-turbo"
    audio_model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    n: Optional[int] = None
    stream: Optional[bool] = None
    logprobs: Optional[int] = None
    echo: Optional[bool] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    best_of: Optional[int] = None
    logit_bias: Optional[Dict[str, float]] = None
    suffix: Optional[str] = None
    user: Optional[str] = None


def _check_stop_sequences(stop_sequences: Sequence[str]) -> None:
    if len(stop_sequences) > MAX_STOP_SEQUENCES:
        raise ValueError(
            f"OpenAI supports prompts with max {MAX_STOP_SEQUENCES} items in stop_sequences"
        )


def _compact(body: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in body.items() if value is not None}


def generate_req(
    prompt: str,
    opt: OpenAIOptions,
    stop_sequences: Sequence[str] = ()
) -> Dict[str, Any]:
    """Build a completions API request body.

    Raises:
        ValueError: If more than four stop sequences are given
    """
    _check_stop_sequences(stop_sequences)
    return _compact({
        "model": opt.model,
        "prompt": prompt,
        "suffix": opt.suffix,
        "max_tokens": opt.max_tokens,
        "temperature": opt.temperature,
        "top_p": opt.top_p if opt.top_p is not None else 1,
        "n": opt.n,
        "stream": opt.stream,
        "logprobs": opt.logprobs,
        "echo": opt.echo,
        "stop": list(stop_sequences) or None,
        "presence_penalty": opt.presence_penalty,
        "frequency_penalty": opt.frequency_penalty,
        "best_of": opt.best_of,
        "logit_bias": opt.logit_bias,
        "user": opt.user,
    })


def generate_chat_req(
    messages: List[Dict[str, Any]],
    opt: OpenAIOptions,
    stop_sequences: Sequence[str] = ()
) -> Dict[str, Any]:
    """Build a chat completions API request body.

    Raises:
        ValueError: If more than four stop sequences are given
    """
    _check_stop_sequences(stop_sequences)
    return _compact({
        "model": opt.model,
        "messages": list(messages),
        "max_tokens": opt.max_tokens,
        "temperature": opt.temperature,
        "top_p": opt.top_p if opt.top_p is not None else 1,
        "n": opt.n,
        "stream": opt.stream,
        "stop": list(stop_sequences) or None,
        "presence_penalty": opt.presence_penalty,
        "frequency_penalty": opt.frequency_penalty,
        "logit_bias": opt.logit_bias,
        "user": opt.user,
    })


def generate_audio_req(
    opt: OpenAIOptions,
    prompt: Optional[str] = None,
    language: Optional[str] = None
) -> Dict[str, Any]:
    """Build an audio transcription request body.

    Raises:
        ValueError: If no audio model is configured
    """
    if not opt.audio_model:
        raise ValueError("OpenAI audio model not set")
    return _compact({
        "model": opt.audio_model,
        "prompt": prompt,
        "temperature": opt.temperature,
        "language": language,
        "response_format": "verbose_json",
    })
