"""
Unit tests for OpenAI trace generation.

Tests normalization of completion and chat exchanges, streamed responses,
model resolution and identity attachment.
"""

import json

import pytest

from ai_trace.core.pricing import TextModelInfo
from ai_trace.core.streaming import StreamMergeError
from ai_trace.core.types import (
    AITextChatRequest,
    AITextCompletionRequest,
    AITextRequestIdentity,
    FunctionCall,
)
from ai_trace.providers.openai.trace import (
    generate_chat_trace,
    generate_completion_trace,
    resolve_model_info,
)


def _stream(*chunks):
    lines = ["data: " + json.dumps(chunk) for chunk in chunks]
    lines.append("data: [DONE]")
    return "\n\n".join(lines)


class TestResolveModelInfo:
    """Test model resolution against the registry."""

    def test_alias_keeps_requested_name(self):
        """Verify pricing comes from the registry but the name is the requested one."""
        info = resolve_model_info("gpt-4-0613")
        assert info.name == "gpt-4-0613"
        assert info.provider == "openai"
        assert info.prompt_token_cost_per_1m == 30.0

    def test_unknown_model(self):
        """Verify unknown models still get an info record."""
        info = resolve_model_info("my-finetune")
        assert info == TextModelInfo(name="my-finetune", provider="openai")

    def test_custom_registry(self):
        """Verify a custom registry is consulted."""
        registry = [TextModelInfo(name="local", prompt_token_cost_per_1m=1.0)]
        assert resolve_model_info("local", registry).prompt_token_cost_per_1m == 1.0


class TestGenerateCompletionTrace:
    """Test completion exchanges."""

    def setup_method(self):
        """Set up a request body."""
        self.request = json.dumps({
            "model": "gpt-3.5-turbo-instruct",
            "prompt": "Say hi",
            "max_tokens": 16,
            "temperature": 0.2,
            "echo": False,
            "logprobs": 2,
            "user": "alice",
        })

    def test_request_normalized(self):
        """Verify prompt, config and model info are normalized."""
        step = generate_completion_trace(self.request).build()
        req = step.request

        assert isinstance(req, AITextCompletionRequest)
        assert req.prompt == "Say hi"
        assert req.model_config.max_tokens == 16
        assert req.model_config.temperature == 0.2
        assert req.model_config.echo is False
        assert req.model_config.logprobs == 2
        assert req.model_config.stream is None
        assert req.model_info.name == "gpt-3.5-turbo-instruct"
        assert req.identity == AITextRequestIdentity(user="alice")

    def test_in_flight_exchange_has_no_response(self):
        """Verify a missing response leaves the step partial."""
        step = generate_completion_trace(self.request).build()
        assert step.response is None
        assert step.is_complete is False

    def test_response_normalized(self):
        """Verify choices and usage are normalized."""
        response = json.dumps({
            "id": "cmpl-9",
            "object": "text_completion",
            "created": 1,
            "model": "gpt-3.5-turbo-instruct",
            "choices": [{"index": 0, "text": "Hi!", "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5},
        })
        step = generate_completion_trace(self.request, response).build()

        assert step.response.remote_id == "cmpl-9"
        assert step.response.results[0].content == "Hi!"
        assert step.response.results[0].finish_reason == "stop"
        assert step.response.model_usage.total_tokens == 5

    def test_streamed_response_merged(self):
        """Verify a streamed completion is merged before normalization."""
        request = json.dumps({"model": "gpt-3.5-turbo-instruct", "prompt": "Count", "stream": True})
        envelope = {"id": "cmpl-s", "object": "text_completion", "created": 1, "model": "gpt-3.5-turbo-instruct"}
        response = _stream(
            dict(envelope, choices=[{"index": 0, "text": "1, ", "finish_reason": None}]),
            dict(envelope, choices=[{"index": 0, "text": "2", "finish_reason": "stop"}]),
        )
        builder = generate_completion_trace(request, response)
        assert builder.is_stream() is True

        step = builder.build()
        assert step.response.results[0].content == "1, 2"
        assert step.response.model_usage is None

    def test_no_identity_without_user(self):
        """Verify no identity is attached when the request names nobody."""
        request = json.dumps({"model": "gpt-3.5-turbo-instruct", "prompt": "x", "user": ""})
        assert generate_completion_trace(request).build().request.identity is None

    def test_invalid_request_rejected(self):
        """Verify requests missing required fields fail."""
        with pytest.raises(ValueError):
            generate_completion_trace(json.dumps({"prompt": "no model"}))


class TestGenerateChatTrace:
    """Test chat exchanges."""

    def setup_method(self):
        """Set up a request body."""
        self.body = {
            "model": "gpt-4o",
            "messages": [
                {"role": "system", "content": "Be brief"},
                {"role": "user", "content": "Weather in Paris?"},
            ],
            "temperature": 0,
        }

    def test_request_normalized(self):
        """Verify messages become ordered chat entries."""
        step = generate_chat_trace(json.dumps(self.body)).build()
        req = step.request

        assert isinstance(req, AITextChatRequest)
        assert [(i.role, i.content) for i in req.chat_prompt] == [
            ("system", "Be brief"),
            ("user", "Weather in Paris?"),
        ]
        assert req.model_config.temperature == 0
        assert req.model_info.prompt_token_cost_per_1m == 5.0
        assert req.identity is None

    def test_functions_and_forced_call(self):
        """Verify offered functions and the forced call are kept."""
        self.body["functions"] = [{
            "name": "get_weather",
            "description": "Current weather",
            "parameters": {"type": "object", "properties": {"city": {"type": "string"}}},
        }]
        self.body["function_call"] = {"name": "get_weather"}
        req = generate_chat_trace(json.dumps(self.body)).build().request

        assert req.functions[0].name == "get_weather"
        assert req.functions[0].parameters["type"] == "object"
        assert req.function_call == "get_weather"

    def test_function_call_mode_string(self):
        """Verify a string function call mode is kept as is."""
        self.body["function_call"] = "auto"
        assert generate_chat_trace(json.dumps(self.body)).build().request.function_call == "auto"

    def test_response_normalized(self):
        """Verify chat choices become results indexed by choice."""
        response = json.dumps({
            "id": "chatcmpl-1",
            "object": "chat.completion",
            "created": 1,
            "model": "gpt-4o",
            "choices": [
                {"index": 0, "message": {"role": "assistant", "content": "Sunny"}, "finish_reason": "stop"},
                {
                    "index": 1,
                    "message": {
                        "role": "assistant",
                        "content": None,
                        "function_call": {"name": "get_weather", "arguments": "{\"city\": \"Paris\"}"},
                    },
                    "finish_reason": "function_call",
                },
            ],
            "usage": {"prompt_tokens": 10, "completion_tokens": 4, "total_tokens": 14},
        })
        step = generate_chat_trace(json.dumps(self.body), response).build()
        results = step.response.results

        assert step.is_complete is True
        assert step.response.remote_id == "chatcmpl-1"
        assert [r.id for r in results] == ["0", "1"]
        assert results[0].content == "Sunny"
        assert results[0].role == "assistant"
        assert results[1].content == ""
        assert results[1].function_calls == (FunctionCall(name="get_weather", args='{"city": "Paris"}'),)
        assert step.response.model_usage.prompt_tokens == 10

    def test_streamed_response_merged(self):
        """Verify a streamed chat is merged, with usage from the last chunk."""
        self.body["stream"] = True
        envelope = {"id": "chatcmpl-s", "object": "chat.completion.chunk", "created": 1, "model": "gpt-4o"}
        response = _stream(
            dict(envelope, choices=[{"index": 0, "delta": {"role": "assistant", "content": ""}, "finish_reason": None}]),
            dict(envelope, choices=[{"index": 0, "delta": {"content": "Hello, "}, "finish_reason": None}]),
            dict(envelope, choices=[{"index": 0, "delta": {"content": "world"}, "finish_reason": None}]),
            dict(
                envelope,
                choices=[{"index": 0, "delta": {}, "finish_reason": "stop"}],
                usage={"prompt_tokens": 8, "completion_tokens": 3, "total_tokens": 11},
            ),
        )
        step = generate_chat_trace(json.dumps(self.body), response).build()
        result = step.response.results[0]

        assert result.content == "Hello, world"
        assert result.role == "assistant"
        assert result.finish_reason == "stop"
        assert step.response.model_usage.total_tokens == 11

    def test_empty_stream_rejected(self):
        """Verify a stream without payloads fails."""
        self.body["stream"] = True
        with pytest.raises(StreamMergeError, match="No data chunks found"):
            generate_chat_trace(json.dumps(self.body), "data: [DONE]\n")

    def test_identity_from_user_and_organization(self):
        """Verify user and organization are attached."""
        self.body["user"] = "alice"
        self.body["organization"] = "acme"
        req = generate_chat_trace(json.dumps(self.body)).build().request
        assert req.identity == AITextRequestIdentity(user="alice", organization="acme")

    def test_unknown_model_unpriced(self):
        """Verify unknown chat models have no pricing."""
        self.body["model"] = "my-finetune"
        info = generate_chat_trace(json.dumps(self.body)).build().request.model_info
        assert info.name == "my-finetune"
        assert info.prompt_token_cost_per_1m is None
