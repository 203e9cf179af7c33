"""
Trace transport.

Ships finished trace steps to a remote collector and fetches
conversational memory back from it.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from ..core.serialization import to_interchange
from ..core.types import AITextTraceStep

logger = logging.getLogger(__name__)

TRACES_PATH = "/api/t/traces"
MEMORY_PATH = "/api/t/traces/memory"
DEFAULT_MEMORY_LIMIT = 10


class TraceTransportError(RuntimeError):
    """Raised when the trace collector cannot fulfil a request."""


class MemoryItem(BaseModel):
    """One entry of recorded conversational memory."""
    model_config = ConfigDict(frozen=True)

    text: str
    role: Optional[str] = None


_MEMORY_ADAPTER = TypeAdapter(Optional[List[MemoryItem]])


class TraceClient:
    """Async HTTP client for a trace collector.

    Sends are not deduplicated; sending the same step twice records it
    twice.
    """

    def __init__(
        self,
        endpoint: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: Base URL of the trace collector (required)
            headers: Extra headers sent with every request
            timeout: Request timeout in seconds
            transport: Optional httpx transport, mainly for tests

        Raises:
            ValueError: If endpoint is missing/empty
        """
        if not endpoint or not endpoint.strip():
            raise ValueError("Trace endpoint is required")

        self._endpoint = endpoint.rstrip("/")
        self._headers = dict(headers or {})
        self._timeout = timeout
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def _post(self, path: str, body: Dict[str, Any]) -> str:
        url = f"{self._endpoint}{path}"
        try:
            # httpx sets the JSON content type unless a caller header overrides it
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, headers=self._headers, json=body)
        except httpx.HTTPError as exc:
            logger.exception("Trace collector request failed: POST %s", url)
            raise TraceTransportError(f"Request to {url} failed: {exc}") from exc

        if response.status_code >= 400:
            logger.error(
                "Trace collector returned error %s for POST %s: %s",
                response.status_code,
                url,
                response.text,
            )
            raise TraceTransportError(
                f"Trace collector error {response.status_code} from {url}:\n{response.text}"
            )

        return response.text

    async def send_trace(self, step: AITextTraceStep) -> None:
        """Send a trace step to the collector.

        Raises:
            TraceTransportError: If the request fails, the response is not
                JSON, or the response reports an error
        """
        url = f"{self._endpoint}{TRACES_PATH}"
        body = {
            "traceId": step.trace_id,
            "sessionId": step.session_id,
            "step": to_interchange(step),
        }
        text = await self._post(TRACES_PATH, body)

        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise TraceTransportError(f"Sending trace to {url}:\n{text}") from exc

        pretty = json.dumps(payload, indent=2)
        if isinstance(payload, dict) and payload.get("error"):
            raise TraceTransportError(f"Sending trace to {url}:\n{pretty}")

        logger.info("Sent trace %s to %s", step.trace_id, url)
        logger.debug("Trace collector replied:\n%s", pretty)

    async def get_memory(
        self,
        session_id: Optional[str] = None,
        user: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[MemoryItem]:
        """Fetch recorded memory for a session or user.

        Args:
            session_id: Session to fetch memory for
            user: User to fetch memory for
            limit: Maximum number of entries (defaults to 10)

        Returns:
            Memory entries in collector order; empty if none were returned

        Raises:
            TraceTransportError: If the request fails or the response is not
                JSON or does not hold a list of memory entries
        """
        url = f"{self._endpoint}{MEMORY_PATH}"
        body: Dict[str, Any] = {"limit": limit if limit is not None else DEFAULT_MEMORY_LIMIT}
        if session_id is not None:
            body["sessionId"] = session_id
        if user is not None:
            body["user"] = user

        text = await self._post(MEMORY_PATH, body)
        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise TraceTransportError(f"Fetching memory from {url}:\n{text}") from exc

        if not isinstance(payload, dict):
            raise TraceTransportError(f"Fetching memory from {url}:\n{text}")

        try:
            memory = _MEMORY_ADAPTER.validate_python(payload.get("memory"))
        except ValidationError as exc:
            logger.error("Trace collector returned malformed memory from %s: %s", url, exc)
            raise TraceTransportError(f"Fetching memory from {url}:\n{text}") from exc

        return memory or []
