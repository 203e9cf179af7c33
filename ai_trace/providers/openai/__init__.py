"""
OpenAI provider bindings.

Wire schemas, stream merging and trace normalization for OpenAI.
"""

from .info import MODEL_INFO_OPENAI
from .requests import OpenAIOptions, generate_audio_req, generate_chat_req, generate_req
from .stream import merge_chat_response_deltas, merge_completion_response_deltas
from .trace import generate_chat_trace, generate_completion_trace, resolve_model_info

__all__ = [
    "MODEL_INFO_OPENAI",
    "OpenAIOptions",
    "generate_audio_req",
    "generate_chat_req",
    "generate_req",
    "merge_chat_response_deltas",
    "merge_completion_response_deltas",
    "generate_chat_trace",
    "generate_completion_trace",
    "resolve_model_info",
]
