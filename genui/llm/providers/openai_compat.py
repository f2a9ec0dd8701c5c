"""
OpenAI-compatible chat-completion provider.

Works with any endpoint that speaks the OpenAI ``/v1/chat/completions`` wire
protocol -- OpenAI itself, Azure OpenAI, vLLM, LM Studio, LocalAI, etc.

Dependencies: ``httpx`` (async HTTP client).  No ``openai`` SDK needed.
"""

from __future__ import annotations

import json
import logging
from typing import AsyncIterator

import httpx

from genui.llm.providers.base import Provider
from genui.llm.types import Message, RawToolDelta, StreamChunk

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class OpenAICompatProvider(Provider):
    """
    Stream-capable provider for any OpenAI-API-compatible endpoint.

    Parameters
    ----------
    url:
        Base URL of the API, e.g. ``"https://api.openai.com/v1"``.
    model:
        Model identifier sent in the ``model`` field.
    api_key:
        Bearer token.  Pass ``""`` for unauthenticated local endpoints.
    timeout:
        Default HTTP request timeout in seconds.
    max_retries:
        Number of automatic retries on transient HTTP errors (5xx, 429).
    transport:
        Optional ``httpx`` transport, used by tests to stub the endpoint.
    """

    def __init__(
        self,
        url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o",
        api_key: str = "",
        timeout: float = 120.0,
        max_retries: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._model = model
        self._api_key = api_key
        self._timeout = timeout
        self._max_retries = max_retries
        self._transport = transport

    @property
    def name(self) -> str:
        return "openai-compat"

    @property
    def model(self) -> str:
        return self._model

    async def chat(
        self,
        messages: list[Message],
        tools: list[dict] | None = None,
        stream: bool = True,
        *,
        temperature: float = 0.0,
        tool_choice: str | dict | None = None,
        response_format: dict | None = None,
        timeout: float | None = None,
    ) -> AsyncIterator[StreamChunk]:
        body = self.build_body(
            messages,
            tools,
            stream,
            temperature=temperature,
            tool_choice=tool_choice,
            response_format=response_format,
        )
        effective_timeout = timeout or self._timeout

        if stream:
            async for chunk in self._stream_request(body, effective_timeout):
                yield chunk
        else:
            yield await self._sync_request(body, effective_timeout)

    # ------------------------------------------------------------------
    # Request building
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def build_body(
        self,
        messages: list[Message],
        tools: list[dict] | None,
        stream: bool,
        *,
        temperature: float = 0.0,
        tool_choice: str | dict | None = None,
        response_format: dict | None = None,
    ) -> dict:
        """Serialize a request into the chat-completions JSON body."""
        wire_messages = [_message_to_wire(m) for m in messages]

        body: dict = {
            "model": self._model,
            "messages": wire_messages,
            "stream": stream,
            "temperature": temperature,
        }
        if tools:
            body["tools"] = tools
            body["tool_choice"] = tool_choice or "auto"
        if response_format:
            body["response_format"] = response_format
        logger.info(
            "REQUEST: model=%s tools=%d messages=%d temperature=%s",
            self._model,
            len(tools) if tools else 0,
            len(wire_messages),
            temperature,
        )
        return body

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    # ------------------------------------------------------------------
    # Streaming request
    # ------------------------------------------------------------------

    async def _stream_request(
        self, body: dict, timeout: float
    ) -> AsyncIterator[StreamChunk]:
        url = f"{self._url}/chat/completions"

        last_error: Exception | None = None
        for attempt in range(1 + self._max_retries):
            try:
                async with self._client(timeout) as client:
                    async with client.stream(
                        "POST", url, json=body, headers=self._headers()
                    ) as response:
                        if response.status_code in _RETRYABLE_STATUS:
                            # Read the body so the connection is released.
                            await response.aread()
                            last_error = httpx.HTTPStatusError(
                                f"HTTP {response.status_code}",
                                request=response.request,
                                response=response,
                            )
                            logger.warning(
                                "Retryable status %d (attempt %d)",
                                response.status_code,
                                attempt + 1,
                            )
                            continue

                        response.raise_for_status()

                        async for chunk in self._parse_sse_stream(response):
                            yield chunk
                        return
            except httpx.TransportError as exc:
                last_error = exc
                if attempt < self._max_retries:
                    continue
                raise

        if last_error is not None:
            raise last_error

    async def _parse_sse_stream(
        self, response: httpx.Response
    ) -> AsyncIterator[StreamChunk]:
        """
        Parse Server-Sent Events from the response line stream.

        Each event is ``data: {json}``; ``data: [DONE]`` terminates the stream.
        """
        async for line in response.aiter_lines():
            line = line.rstrip("\r")
            if not line.startswith("data:"):
                continue

            data_str = line[len("data:"):].strip()
            if data_str == "[DONE]":
                yield StreamChunk(done=True)
                return

            try:
                data = json.loads(data_str)
            except json.JSONDecodeError:
                logger.warning("Failed to parse SSE data: %s", data_str[:200])
                continue

            chunk = _sse_data_to_chunk(data)
            if chunk is not None:
                yield chunk

        # Stream ended without [DONE].
        yield StreamChunk(done=True)

    # ------------------------------------------------------------------
    # Non-streaming request
    # ------------------------------------------------------------------

    async def _sync_request(self, body: dict, timeout: float) -> StreamChunk:
        url = f"{self._url}/chat/completions"

        last_error: Exception | None = None
        for attempt in range(1 + self._max_retries):
            try:
                async with self._client(timeout) as client:
                    resp = await client.post(url, json=body, headers=self._headers())

                    if resp.status_code in _RETRYABLE_STATUS:
                        last_error = httpx.HTTPStatusError(
                            f"HTTP {resp.status_code}",
                            request=resp.request,
                            response=resp,
                        )
                        logger.warning(
                            "Retryable status %d (attempt %d)",
                            resp.status_code,
                            attempt + 1,
                        )
                        continue

                    resp.raise_for_status()
                    data = resp.json()
            except httpx.TransportError as exc:
                last_error = exc
                if attempt < self._max_retries:
                    continue
                raise
            else:
                return _parse_non_stream(data)

        if last_error is not None:
            raise last_error
        raise RuntimeError("unreachable")  # pragma: no cover


# ---------------------------------------------------------------------------
# Wire helpers
# ---------------------------------------------------------------------------


def _message_to_wire(msg: Message) -> dict:
    m: dict = {"role": msg.role, "content": msg.content}
    if msg.tool_calls:
        m["tool_calls"] = [
            {
                "id": tc.id,
                "type": "function",
                "function": {
                    "name": tc.name,
                    "arguments": json.dumps(tc.arguments),
                },
            }
            for tc in msg.tool_calls
        ]
    if msg.tool_call_id:
        m["tool_call_id"] = msg.tool_call_id
    return m


def _sse_data_to_chunk(data: dict) -> StreamChunk | None:
    """Convert a parsed SSE ``data`` payload into a ``StreamChunk``."""
    choices = data.get("choices")
    if not choices:
        return None

    choice = choices[0]
    delta = choice.get("delta") or {}
    done = choice.get("finish_reason") is not None

    tool_deltas: list[RawToolDelta] | None = None
    raw_tcs = delta.get("tool_calls")
    if raw_tcs:
        tool_deltas = []
        for raw_tc in raw_tcs:
            func = raw_tc.get("function") or {}
            tool_deltas.append(
                RawToolDelta(
                    call_index=raw_tc.get("index", 0),
                    id=raw_tc.get("id"),
                    name_delta=func.get("name") or "",
                    args_delta=func.get("arguments") or "",
                    done=done,
                )
            )

    return StreamChunk(
        delta=delta.get("content") or "",
        tool_deltas=tool_deltas,
        done=done,
    )


def _parse_non_stream(data: dict) -> StreamChunk:
    """Convert a non-streaming response into a single ``StreamChunk``."""
    choices = data.get("choices") or []
    if not choices:
        return StreamChunk(done=True)

    message = choices[0].get("message") or {}

    tool_deltas: list[RawToolDelta] | None = None
    raw_tcs = message.get("tool_calls")
    if raw_tcs:
        tool_deltas = [
            RawToolDelta(
                call_index=idx,
                id=raw_tc.get("id"),
                name_delta=(raw_tc.get("function") or {}).get("name", ""),
                args_delta=(raw_tc.get("function") or {}).get("arguments", ""),
                done=True,
            )
            for idx, raw_tc in enumerate(raw_tcs)
        ]

    return StreamChunk(
        delta=message.get("content") or "",
        tool_deltas=tool_deltas,
        done=True,
    )
