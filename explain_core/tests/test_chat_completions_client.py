import asyncio
import json

import httpx
import pytest

from explain_core.domain.exceptions import ApiError, ConfigurationError, NetworkError, ResponseParseError
from explain_core.domain.models import ChatMessage, ChatRequest, ErrorKind
from explain_core.providers import create_client
from explain_core.providers.chat_completions import ChatCompletionsClient, reduce_response


class SettingsStub:
    api_endpoint = "https://llm.example.test/v1/chat/completions"
    http_timeout = 60.0


def _request():
    return ChatRequest(
        model="gpt-3.5-turbo",
        messages=[
            ChatMessage(role="system", content="sys"),
            ChatMessage(role="user", content="Hello world"),
        ],
    )


def _fake_client(monkeypatch, *, status=200, body=None, error=None, captured=None):
    captured = captured if captured is not None else {}

    class Resp:
        status_code = status
        content = body if isinstance(body, bytes) else json.dumps(body).encode()

        @property
        def text(self):
            return self.content.decode(errors="replace")

    class Client:
        def __init__(self, *a, **kw):
            captured["client_kwargs"] = kw

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def post(self, url, json=None, headers=None, **_):
            captured["url"] = url
            captured["payload"] = json
            captured["headers"] = headers
            if error is not None:
                raise error
            return Resp()

    monkeypatch.setattr("httpx.AsyncClient", Client)
    return captured


def test_reducer_extracts_first_choice_content():
    result = reduce_response('{"choices":[{"message":{"content":"Summary: X"}}]}')
    assert result.ok
    assert result.content == "Summary: X"


def test_reducer_rejects_empty_choices():
    result = reduce_response('{"choices":[]}')
    assert not result.ok
    assert result.error is ErrorKind.RESPONSE_UNUSABLE


@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        b"[1, 2]",
        b'{"error": {"message": "bad"}}',
        b'{"choices": [{"text": "legacy"}]}',
        b'{"choices": [{"message": {"role": "assistant"}}]}',
        b'{"choices": [{"message": {"content": null}}]}',
        b'{"choices": ["oops"]}',
    ],
)
def test_reducer_maps_every_deviation_to_unusable(body):
    result = reduce_response(body)
    assert result.error is ErrorKind.RESPONSE_UNUSABLE
    assert result.detail


def test_reducer_accepts_mapping():
    assert reduce_response({"choices": [{"message": {"content": ""}}]}).content == ""


def test_client_posts_full_history(monkeypatch):
    captured = _fake_client(monkeypatch, body={"choices": [{"message": {"content": "ok"}}]})
    client = ChatCompletionsClient(SettingsStub())
    assert client.endpoint == SettingsStub.api_endpoint
    content = asyncio.run(client.complete(_request()))
    assert content == "ok"
    assert captured["url"] == client.endpoint
    assert captured["headers"]["Content-Type"] == "application/json"
    assert captured["client_kwargs"]["timeout"] == 60.0
    assert captured["payload"] == {
        "model": "gpt-3.5-turbo",
        "messages": [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "Hello world"},
        ],
    }


def test_client_non_200_is_api_error(monkeypatch):
    _fake_client(monkeypatch, status=500, body={"error": "boom"})
    client = ChatCompletionsClient(SettingsStub())
    with pytest.raises(ApiError) as exc:
        asyncio.run(client.complete(_request()))
    assert exc.value.http_status == 500
    assert exc.value.kind is ErrorKind.SERVER_ERROR


def test_client_other_2xx_is_api_error(monkeypatch):
    _fake_client(monkeypatch, status=201, body={"choices": [{"message": {"content": "ok"}}]})
    client = ChatCompletionsClient(SettingsStub())
    with pytest.raises(ApiError):
        asyncio.run(client.complete(_request()))


def test_client_transport_error_is_network_error(monkeypatch):
    _fake_client(monkeypatch, error=httpx.ConnectError("connection refused"))
    client = ChatCompletionsClient(SettingsStub())
    with pytest.raises(NetworkError) as exc:
        asyncio.run(client.complete(_request()))
    assert exc.value.kind is ErrorKind.TRANSPORT_FAILURE


def test_client_timeout_is_network_error(monkeypatch):
    _fake_client(monkeypatch, error=httpx.ReadTimeout("timed out"))
    client = ChatCompletionsClient(SettingsStub())
    with pytest.raises(NetworkError):
        asyncio.run(client.complete(_request()))


def test_client_bad_body_is_parse_error(monkeypatch):
    _fake_client(monkeypatch, body=b"<html>gateway</html>")
    client = ChatCompletionsClient(SettingsStub())
    with pytest.raises(ResponseParseError) as exc:
        asyncio.run(client.complete(_request()))
    assert exc.value.kind is ErrorKind.UNPARSEABLE_RESPONSE


def test_client_requires_endpoint():
    class NoEndpoint:
        api_endpoint = None
        http_timeout = 60.0

    with pytest.raises(ConfigurationError):
        ChatCompletionsClient(NoEndpoint())


def test_client_rejects_invalid_endpoint():
    class BadEndpoint:
        api_endpoint = "not a url"
        http_timeout = 60.0

    with pytest.raises(ConfigurationError):
        create_client(BadEndpoint())
