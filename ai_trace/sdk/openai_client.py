"""
Traced OpenAI client wrapper.

Records a canonical trace step for every call without modifying behavior.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from openai import APIError as OpenAIAPIError
from openai import OpenAI

from ..core.builders import AITextTraceStepBuilder
from ..core.pricing import TextModelInfo
from ..core.types import AITextTraceStep, APIError, ParsingError
from ..providers.openai.info import MODEL_INFO_OPENAI
from ..providers.openai.requests import (
    OpenAIOptions,
    generate_audio_req,
    generate_chat_req,
    generate_req,
)
from ..providers.openai.trace import generate_chat_trace, generate_completion_trace
from ..transport.client import TraceClient

logger = logging.getLogger(__name__)

TraceGenerator = Callable[..., AITextTraceStepBuilder]


class TracedOpenAI:
    """OpenAI client wrapper that records trace steps.

    Every completion or chat call produces one trace step, queued on
    ``traces`` until ``flush`` ships them. Streamed responses are consumed
    and returned as a list of chunks. API failures are recorded on the
    trace and then re-raised unchanged. Exchanges that cannot be decoded
    never fail the call: the result is returned as OpenAI gave it.
    """

    def __init__(
        self,
        options: OpenAIOptions,
        trace_client: Optional[TraceClient] = None,
        session_id: Optional[str] = None,
        registry: Sequence[TextModelInfo] = MODEL_INFO_OPENAI,
    ):
        """Initialize traced OpenAI client.

        Args:
            options: Request options; options.model is required
            trace_client: Collector client used by flush()
            session_id: Session recorded on every trace step
            registry: Model metadata used to resolve models

        Raises:
            ValueError: If the model is missing/empty
        """
        if not options.model or not options.model.strip():
            raise ValueError("model is required and cannot be empty")

        self.options = options
        self.trace_client = trace_client
        self.session_id = session_id
        self.registry = registry
        self.traces: List[AITextTraceStep] = []
        self.client = OpenAI()

    def chat(
        self,
        messages: List[Dict[str, Any]],
        stop_sequences: Sequence[str] = ()
    ) -> Any:
        """Create a chat completion and record its trace.

        Raises:
            ValueError: If messages is empty or too many stop sequences are given
            OpenAI API errors: Propagated after being recorded
        """
        if not messages:
            raise ValueError("messages is required and cannot be empty")

        body = generate_chat_req(messages, self.options, stop_sequences)
        return self._call(self.client.chat.completions.create, body, generate_chat_trace)

    def complete(self, prompt: str, stop_sequences: Sequence[str] = ()) -> Any:
        """Create a text completion and record its trace.

        Raises:
            ValueError: If prompt is empty or too many stop sequences are given
            OpenAI API errors: Propagated after being recorded
        """
        if not prompt:
            raise ValueError("prompt is required and cannot be empty")

        body = generate_req(prompt, self.options, stop_sequences)
        return self._call(self.client.completions.create, body, generate_completion_trace)

    def transcribe(
        self,
        file: Any,
        prompt: Optional[str] = None,
        language: Optional[str] = None
    ) -> Any:
        """Transcribe audio with the configured audio model.

        Raises:
            ValueError: If no audio model is configured
        """
        body = generate_audio_req(self.options, prompt, language)
        return self.client.audio.transcriptions.create(file=file, **body)

    def _call(
        self,
        create: Callable[..., Any],
        body: Dict[str, Any],
        generate_trace: TraceGenerator
    ) -> Any:
        request = json.dumps(body)
        started = time.perf_counter()

        try:
            response = create(**body)
            if body.get("stream"):
                result = list(response)
                raw = "\n".join(
                    f"data: {chunk.model_dump_json()}" for chunk in result
                ) + "\ndata: [DONE]"
            else:
                result = response
                raw = response.model_dump_json()
        except OpenAIAPIError as e:
            step = self._trace(generate_trace, request)
            if step is not None:
                step.set_api_error(APIError(
                    message=str(e),
                    status=getattr(e, "status_code", None),
                    request=body,
                    body=e.body,
                ))
                self._record(step, started)
            logger.error("OpenAI call failed for model %s: %s", body.get("model"), e)
            raise

        step = self._trace(generate_trace, request, raw)
        if step is not None:
            self._record(step, started)
        return result

    def _trace(
        self,
        generate_trace: TraceGenerator,
        request: str,
        response: Optional[str] = None
    ) -> Optional[AITextTraceStepBuilder]:
        """Build the trace of an exchange without letting decoding fail the call.

        An undecodable response is recorded as a parsing error on a
        request-only step. An undecodable request is logged and yields None.
        """
        try:
            return generate_trace(request, response, registry=self.registry)
        except ValueError as e:
            if response is None:
                logger.exception("Could not decode OpenAI request for tracing")
                return None
            error = ParsingError(message=str(e), value=response)

        logger.warning("Could not decode OpenAI response for tracing: %s", error.message)
        step = self._trace(generate_trace, request)
        if step is not None:
            step.set_parsing_error(error)
        return step

    def _record(self, step: AITextTraceStepBuilder, started: float) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000
        trace = (
            step.set_trace_id()
            .set_session_id(self.session_id)
            .set_model_response_time(elapsed_ms)
            .build()
        )
        self.traces.append(trace)
        logger.debug("Recorded trace %s (%.1f ms)", trace.trace_id, elapsed_ms)

    async def flush(self) -> int:
        """Send queued trace steps to the collector.

        Steps are removed from the queue once sent; a failure leaves the
        failed step and everything after it queued.

        Returns:
            Number of trace steps sent

        Raises:
            ValueError: If no trace client is configured
            TraceTransportError: If sending a step fails
        """
        if self.trace_client is None:
            raise ValueError("trace_client is required to flush traces")

        sent = 0
        while self.traces:
            await self.trace_client.send_trace(self.traces[0])
            self.traces.pop(0)
            sent += 1
        return sent
