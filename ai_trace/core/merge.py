"""
Cross-step response merging.

Linearizes the responses of a multi-step exchange (for example a tool-use
loop) into one response for summaries and cost accounting.
"""

import dataclasses
from typing import List, Optional, Sequence

from .token_counter import TokenUsage
from .types import FunctionCall, TextResponse, TextResponseResult


def merge_text_responses(responses: Sequence[TextResponse]) -> TextResponse:
    """Merge sequential step responses into a single response.

    Rules:
    - Content of the first result of every step is concatenated in order
    - At most one function call per step (the first) is kept
    - session_id, remote_id, model_usage and embed_model_usage are taken
      from the last step

    The merged result otherwise copies the last step's first result. An
    empty input yields a single result with empty content.

    Args:
        responses: Step responses in execution order

    Returns:
        The merged TextResponse
    """
    content = ""
    function_calls: List[FunctionCall] = []

    session_id: Optional[str] = None
    remote_id: Optional[str] = None
    model_usage: Optional[TokenUsage] = None
    embed_model_usage: Optional[TokenUsage] = None
    last_results: Sequence[TextResponseResult] = ()

    for response in responses:
        if response.results:
            first = response.results[0]
            if first.content:
                content += first.content

        # One call per step; later calls in the same step are dropped
        for result in response.results:
            if result.function_calls:
                function_calls.append(result.function_calls[0])
                break

        session_id = response.session_id
        remote_id = response.remote_id
        model_usage = response.model_usage
        embed_model_usage = response.embed_model_usage
        last_results = response.results

    base = last_results[0] if last_results else TextResponseResult()
    merged = dataclasses.replace(
        base,
        content=content,
        function_calls=tuple(function_calls) if function_calls else None,
    )

    return TextResponse(
        session_id=session_id,
        remote_id=remote_id,
        results=(merged,),
        model_usage=model_usage,
        embed_model_usage=embed_model_usage,
    )
