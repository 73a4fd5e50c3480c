"""Tests for the completion API client."""
import json

import httpx
import pytest

from echoes_platform.echoes_service.completion import CompletionClient
from echoes_platform.echoes_service.errors import CompletionError, ConfigError

API_URL = "https://completions.test/v1/chat/completions"


def make_client(handler, api_key="sk-test"):
    return CompletionClient(
        api_key=api_key,
        api_url=API_URL,
        model="gpt-3.5-turbo",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


def test_complete_sends_chat_request():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": "pong"}}]})

    assert make_client(handler).complete("ping") == "pong"
    assert seen["url"] == API_URL
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"] == {"model": "gpt-3.5-turbo", "messages": [{"role": "user", "content": "ping"}]}


def test_missing_api_key():
    client = make_client(lambda request: httpx.Response(200), api_key="")
    with pytest.raises(ConfigError):
        client.complete("ping")


def test_non_200_status():
    client = make_client(lambda request: httpx.Response(429, json={"error": "rate limited"}))
    with pytest.raises(CompletionError, match="429"):
        client.complete("ping")


@pytest.mark.parametrize("body", [b"not json", b"[]", b'{"choices": []}', b'{"choices": [{"text": "x"}]}'])
def test_bad_response_body(body):
    client = make_client(lambda request: httpx.Response(200, content=body))
    with pytest.raises(CompletionError):
        client.complete("ping")


def test_transport_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CompletionError):
        make_client(handler).complete("ping")
