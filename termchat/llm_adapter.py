"""LLM adapter: talks to an OpenAI-compatible chat completion API."""

from __future__ import annotations

import http.client
import json
import logging
import queue
import threading
import time
import urllib.request
import urllib.error
from collections.abc import Iterator
from dataclasses import dataclass, field

from termchat.config import DEFAULT_MAX_TOKENS, OPENAI_BASE_URL

logger = logging.getLogger(__name__)

_MAX_CONNECT_RETRIES = 3
_RETRY_DELAY = 2.0  # seconds between retries
_QUEUE_POLL_INTERVAL = 0.5  # seconds; how often the main thread wakes to check signals
_SSE_PREFIX = "data:"
_SSE_DONE = "[DONE]"


class APIError(Exception):
    """The completion service rejected a request (HTTP 4xx)."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"Received {status}: {message}")
        self.status = status
        self.message = message


@dataclass
class Message:
    role: str        # "system" | "user" | "assistant"
    content: str


@dataclass
class ChatResponse:
    content: str = ""
    finish_reason: str | None = None
    raw: dict = field(default_factory=dict)


def _stream_reader(resp: object, q: queue.Queue) -> None:
    """Read lines from an HTTP response in a background thread.

    Puts ``("line", bytes)`` for each line, ``("done", None)`` on
    completion, or ``("error", exc)`` on failure.
    """
    try:
        for raw_line in resp:
            q.put(("line", raw_line))
        q.put(("done", None))
    except Exception as exc:
        q.put(("error", exc))


def _error_message(exc: urllib.error.HTTPError) -> str:
    try:
        body = json.loads(exc.read().decode())
        return body.get("error", {}).get("message") or str(exc.reason)
    except (ValueError, AttributeError, OSError):
        return str(exc.reason)


def parse_sse_line(raw_line: bytes) -> dict | None:
    """Decode one Server-Sent Events line into its JSON payload.

    Returns ``None`` for blank lines, comments, non-data fields and lines
    that are not valid JSON.  The ``[DONE]`` sentinel is returned as
    ``{"done": True}``.
    """
    line = raw_line.decode("utf-8", errors="replace").strip()
    if not line.startswith(_SSE_PREFIX):
        return None
    data = line[len(_SSE_PREFIX):].strip()
    if data == _SSE_DONE:
        return {"done": True}
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        logger.debug("skipping malformed stream line: %r", data)
        return None


class LLMAdapter:
    """Sends chat requests to a hosted completion service."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = (base_url or OPENAI_BASE_URL).rstrip("/")
        self.max_tokens = max_tokens

    def _request(
        self,
        path: str,
        payload: dict | None = None,
    ) -> urllib.request.Request:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        data = None
        if payload is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(payload).encode()
        return urllib.request.Request(
            f"{self.base_url}{path}",
            data=data,
            headers=headers,
            method="POST" if payload is not None else "GET",
        )

    def _open_with_retry(
        self,
        req: urllib.request.Request,
        timeout: float = 300,
    ) -> "http.client.HTTPResponse":
        """Open a URL request with retries on transient failures.

        Raises :class:`APIError` immediately on 4xx responses (client
        errors are not transient).  Retries only on connection-level
        failures and 5xx server errors.
        """
        last_exc: Exception | None = None
        for attempt in range(_MAX_CONNECT_RETRIES):
            try:
                return urllib.request.urlopen(req, timeout=timeout)
            except urllib.error.HTTPError as exc:
                if 400 <= exc.code < 500:
                    raise APIError(exc.code, _error_message(exc)) from exc
                last_exc = exc
            except urllib.error.URLError as exc:
                last_exc = exc
            logger.warning(
                "request to %s failed (attempt %d/%d): %s",
                req.full_url, attempt + 1, _MAX_CONNECT_RETRIES, last_exc,
            )
            if attempt < _MAX_CONNECT_RETRIES - 1:
                time.sleep(_RETRY_DELAY)
        raise ConnectionError(
            f"Cannot reach {self.base_url}: {last_exc}"
        ) from last_exc

    def _payload(self, messages: list[Message], stream: bool) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "max_tokens": self.max_tokens,
            "stream": stream,
        }

    def chat(self, messages: list[Message]) -> ChatResponse:
        """Send a chat completion request (non-streaming)."""
        req = self._request("/chat/completions", self._payload(messages, stream=False))
        with self._open_with_retry(req) as resp:
            data = json.loads(resp.read().decode())

        choices = data.get("choices") or [{}]
        choice = choices[0]
        return ChatResponse(
            content=choice.get("message", {}).get("content") or "",
            finish_reason=choice.get("finish_reason"),
            raw=data,
        )

    def chat_stream(self, messages: list[Message]) -> Iterator[str | ChatResponse]:
        """Stream a chat completion.

        Yields ``str`` fragments as they arrive, followed by a final
        :class:`ChatResponse`.  The socket reading runs in a daemon thread
        so the main thread stays responsive to signals (Ctrl+C).
        """
        req = self._request("/chat/completions", self._payload(messages, stream=True))
        resp = self._open_with_retry(req)

        q: queue.Queue = queue.Queue()
        reader_thread = threading.Thread(
            target=_stream_reader, args=(resp, q), daemon=True,
        )
        reader_thread.start()

        accumulated = ""
        finish_reason: str | None = None
        last_data: dict = {}

        try:
            while True:
                try:
                    kind, value = q.get(timeout=_QUEUE_POLL_INTERVAL)
                except queue.Empty:
                    # Wake up so pending signals (KeyboardInterrupt) get delivered.
                    continue

                if kind == "done":
                    break

                if kind == "error":
                    if isinstance(value, (OSError, http.client.HTTPException)):
                        raise ConnectionError(
                            f"Stream from {self.base_url} interrupted: {value}"
                        ) from value
                    raise value  # type: ignore[misc]

                data = parse_sse_line(value)
                if data is None:
                    continue
                if data.get("done"):
                    break

                last_data = data
                for choice in data.get("choices", []):
                    chunk = choice.get("delta", {}).get("content") or ""
                    if choice.get("finish_reason"):
                        finish_reason = choice["finish_reason"]
                    if chunk:
                        accumulated += chunk
                        yield chunk
        finally:
            try:
                resp.close()
            except OSError:
                pass

        yield ChatResponse(
            content=accumulated,
            finish_reason=finish_reason,
            raw=last_data,
        )

    def list_models(self) -> list[str]:
        """Return the ids of the models available to this API key."""
        with self._open_with_retry(self._request("/models"), timeout=30) as resp:
            data = json.loads(resp.read().decode())
        return sorted(m.get("id", "") for m in data.get("data", []))
