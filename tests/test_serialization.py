"""
Unit tests for interchange encoding.
"""

from datetime import datetime, timezone

from ai_trace.core.pricing import TextModelInfo
from ai_trace.core.serialization import to_interchange
from ai_trace.core.token_counter import TokenUsage
from ai_trace.core.types import (
    AITextChatRequest,
    AITextTraceStep,
    AITextTraceStepResponse,
    APIError,
    ChatPromptItem,
    TextModelConfig,
    TextResponseResult,
)


class TestToInterchange:
    """Test to_interchange."""

    def test_step_keys_are_camel_case(self):
        """Verify nested records use camelCase keys and omit absent fields."""
        step = AITextTraceStep(
            trace_id="t-1",
            created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
            request=AITextChatRequest(
                chat_prompt=(ChatPromptItem(content="Hi", role="user"),),
                model_config=TextModelConfig(max_tokens=5, stream=False),
                model_info=TextModelInfo(name="gpt-4o", prompt_token_cost_per_1m=5.0),
            ),
            response=AITextTraceStepResponse(
                results=(TextResponseResult(content="Hello", finish_reason="stop"),),
                model_response_time=12.5,
            ),
        )

        assert to_interchange(step) == {
            "traceId": "t-1",
            "createdAt": "2024-05-01T12:00:00Z",
            "request": {
                "chatPrompt": [{"content": "Hi", "role": "user"}],
                "modelConfig": {"maxTokens": 5, "stream": False},
                "modelInfo": {
                    "name": "gpt-4o",
                    "aliases": [],
                    "characterIsToken": False,
                    "promptTokenCostPer1M": 5.0,
                },
            },
            "response": {
                "results": [{"content": "Hello", "finishReason": "stop"}],
                "modelResponseTime": 12.5,
            },
        }

    def test_per_1m_price_keys(self):
        """Verify per-1M price keys keep their upper-case M."""
        info = TextModelInfo(
            name="gpt-4",
            aliases=("gpt-4-0613",),
            prompt_token_cost_per_1m=30.0,
            completion_token_cost_per_1m=60.0,
        )
        encoded = to_interchange(info)
        assert encoded["aliases"] == ["gpt-4-0613"]
        assert encoded["promptTokenCostPer1M"] == 30.0
        assert encoded["completionTokenCostPer1M"] == 60.0
        assert "currency" not in encoded

    def test_usage_and_errors_encoded(self):
        """Verify nested usage and error records are encoded."""
        response = AITextTraceStepResponse(
            remote_id="r-1",
            model_usage=TokenUsage(prompt_tokens=3, completion_tokens=2, total_tokens=5),
            api_error=APIError(message="rate limited", status=429, body={"code": "rate_limit"}),
        )
        assert to_interchange(response) == {
            "remoteId": "r-1",
            "results": [],
            "modelUsage": {"promptTokens": 3, "completionTokens": 2, "totalTokens": 5},
            "apiError": {"message": "rate limited", "status": 429, "body": {"code": "rate_limit"}},
        }
