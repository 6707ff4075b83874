"""Tests for the LLM adapter: SSE parsing, streaming, errors and retries."""

import http.client
import io
import json
import urllib.error
from unittest.mock import patch

import pytest

from termchat.llm_adapter import (
    APIError,
    ChatResponse,
    LLMAdapter,
    Message,
    parse_sse_line,
)


class FakeResponse:
    def __init__(self, lines=(), body=b""):
        self._lines = list(lines)
        self._body = body
        self.closed = False

    def __iter__(self):
        return iter(self._lines)

    def read(self):
        return self._body

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


def _sse(content=None, finish=None):
    delta = {"content": content} if content is not None else {}
    payload = {"choices": [{"delta": delta, "finish_reason": finish}]}
    return f"data: {json.dumps(payload)}\n".encode()


def _adapter():
    return LLMAdapter("sk-test", "gpt-test", base_url="http://api.test/v1/")


class TestParseSseLine:
    def test_data_line(self):
        assert parse_sse_line(b'data: {"a": 1}\n') == {"a": 1}

    def test_done(self):
        assert parse_sse_line(b"data: [DONE]\n") == {"done": True}

    def test_blank_and_comment(self):
        assert parse_sse_line(b"\n") is None
        assert parse_sse_line(b": keep-alive\n") is None

    def test_malformed_json(self):
        assert parse_sse_line(b"data: {oops\n") is None

    def test_utf8_content(self):
        line = 'data: {"t": "ü✓"}\n'.encode("utf-8")
        assert parse_sse_line(line) == {"t": "ü✓"}


class TestChatStream:
    def test_yields_fragments_then_response(self):
        lines = [
            b": comment\n",
            _sse("Hello"),
            b"\n",
            _sse(" `wor"),
            _sse("ld`"),
            _sse(finish="stop"),
            b"data: [DONE]\n",
        ]
        resp = FakeResponse(lines)
        with patch("urllib.request.urlopen", return_value=resp) as mock_open:
            items = list(_adapter().chat_stream([Message("user", "hi")]))

        assert items[:-1] == ["Hello", " `wor", "ld`"]
        final = items[-1]
        assert isinstance(final, ChatResponse)
        assert final.content == "Hello `world`"
        assert final.finish_reason == "stop"
        assert resp.closed

        req = mock_open.call_args[0][0]
        assert req.full_url == "http://api.test/v1/chat/completions"
        assert req.get_header("Authorization") == "Bearer sk-test"
        body = json.loads(req.data.decode())
        assert body["stream"] is True
        assert body["model"] == "gpt-test"
        assert body["messages"] == [{"role": "user", "content": "hi"}]

    def test_stream_without_done_marker(self):
        resp = FakeResponse([_sse("a"), _sse("b")])
        with patch("urllib.request.urlopen", return_value=resp):
            items = list(_adapter().chat_stream([]))
        assert items[:-1] == ["a", "b"]
        assert items[-1].content == "ab"


class TestChat:
    def test_non_streaming(self):
        body = json.dumps({
            "choices": [{"message": {"content": "done"}, "finish_reason": "stop"}],
        }).encode()
        with patch("urllib.request.urlopen", return_value=FakeResponse(body=body)):
            resp = _adapter().chat([Message("user", "x")])
        assert resp.content == "done"
        assert resp.finish_reason == "stop"


class TestErrors:
    def test_client_error_raises_immediately(self):
        err = urllib.error.HTTPError(
            "http://api.test/v1/chat/completions", 401, "Unauthorized", {},
            io.BytesIO(b'{"error": {"message": "bad key"}}'),
        )
        with patch("urllib.request.urlopen", side_effect=err) as mock_open:
            with pytest.raises(APIError) as info:
                _adapter().chat([Message("user", "x")])
        assert info.value.status == 401
        assert info.value.message == "bad key"
        assert mock_open.call_count == 1

    def test_connection_failure_retries_then_raises(self):
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("refused")) as mock_open, \
                patch("termchat.llm_adapter.time.sleep"):
            with pytest.raises(ConnectionError):
                _adapter().chat([Message("user", "x")])
        assert mock_open.call_count == 3

    def test_server_error_then_success(self):
        err = urllib.error.HTTPError("u", 503, "Unavailable", {}, io.BytesIO(b""))
        body = json.dumps({"choices": [{"message": {"content": "ok"}}]}).encode()
        with patch("urllib.request.urlopen", side_effect=[err, FakeResponse(body=body)]), \
                patch("termchat.llm_adapter.time.sleep"):
            assert _adapter().chat([]).content == "ok"


class TestListModels:
    def test_sorted_ids(self):
        body = json.dumps({"data": [{"id": "gpt-b"}, {"id": "gpt-a"}]}).encode()
        with patch("urllib.request.urlopen", return_value=FakeResponse(body=body)) as mock_open:
            assert _adapter().list_models() == ["gpt-a", "gpt-b"]
        req = mock_open.call_args[0][0]
        assert req.get_method() == "GET"
        assert req.full_url == "http://api.test/v1/models"


class BrokenStream(FakeResponse):
    def __init__(self, lines, exc):
        super().__init__(lines)
        self._exc = exc

    def __iter__(self):
        yield from self._lines
        raise self._exc


class TestStreamInterrupted:
    @pytest.mark.parametrize("exc", [
        TimeoutError("read timed out"),
        http.client.IncompleteRead(b"partial"),
        OSError("connection reset"),
    ])
    def test_socket_error_becomes_connection_error(self, exc):
        resp = BrokenStream([_sse("Hel")], exc)
        items = []
        with patch("urllib.request.urlopen", return_value=resp):
            with pytest.raises(ConnectionError) as info:
                for item in _adapter().chat_stream([Message("user", "hi")]):
                    items.append(item)
        assert items == ["Hel"]
        assert info.value.__cause__ is exc
        assert resp.closed
