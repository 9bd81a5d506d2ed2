import asyncio
import time

import httpx
import pytest

from clarityai.config import Settings
from clarityai.errors import ConfigurationError, TransportError
from clarityai.gateway import ChatCompletionClient, ChatMessage, CompletionRequest, build_request
from helpers import ScriptedProvider


API_URL = "https://provider.test/v1/chat/completions"


def _reply(text: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": text}}]})


def _request() -> CompletionRequest:
    return build_request(
        [ChatMessage("system", "You are helpful."), ChatMessage("user", "hi")],
        model="deepseek-chat",
        temperature=0.1,
        max_tokens=100,
    )


def _client(handler, **overrides) -> ChatCompletionClient:
    options = {"api_key": "secret", "api_url": API_URL, "backoff_seconds": 0.0}
    options.update(overrides)
    return ChatCompletionClient(Settings(**options), transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_returns_first_choice_content():
    provider = ScriptedProvider(_reply("Stacks is a Bitcoin layer."))
    client = _client(provider)

    assert await client.complete(_request()) == "Stacks is a Bitcoin layer."

    sent = provider.requests[0]
    assert sent.headers["Authorization"] == "Bearer secret"
    body = httpx.Response(200, content=sent.content).json()
    assert body["model"] == "deepseek-chat"
    assert body["max_tokens"] == 100
    assert [m["role"] for m in body["messages"]] == ["system", "user"]
    await client.close()


@pytest.mark.anyio
async def test_missing_credentials_fail_before_network():
    provider = ScriptedProvider()
    client = _client(provider, api_key=None)

    with pytest.raises(ConfigurationError):
        await client.complete(_request())
    assert provider.requests == []
    await client.close()


@pytest.mark.anyio
async def test_retries_with_linear_backoff():
    provider = ScriptedProvider(
        httpx.ConnectError("connection refused"),
        httpx.Response(503, json={"error": "busy"}),
        _reply("ok"),
    )
    client = _client(provider, backoff_seconds=1.0)

    started = time.monotonic()
    assert await client.complete(_request()) == "ok"
    elapsed = time.monotonic() - started

    assert len(provider.requests) == 3
    assert elapsed >= 2.9
    await client.close()


@pytest.mark.anyio
async def test_raises_last_error_after_three_attempts():
    provider = ScriptedProvider(
        httpx.Response(500),
        httpx.Response(502),
        httpx.Response(429),
    )
    client = _client(provider)

    with pytest.raises(TransportError) as excinfo:
        await client.complete(_request())

    assert len(provider.requests) == 3
    assert excinfo.value.status_code == 429
    assert excinfo.value.attempt == 3
    await client.close()


@pytest.mark.anyio
async def test_malformed_body_is_retried():
    provider = ScriptedProvider(httpx.Response(200, json={"unexpected": True}), _reply("fine"))
    client = _client(provider)

    assert await client.complete(_request()) == "fine"
    assert len(provider.requests) == 2
    await client.close()


@pytest.mark.anyio
async def test_null_content_becomes_empty_string():
    provider = ScriptedProvider(httpx.Response(200, json={"choices": [{"message": {"content": None}}]}))
    client = _client(provider)

    assert await client.complete(_request()) == ""
    await client.close()


def test_request_validation():
    with pytest.raises(ValueError):
        CompletionRequest(messages=(), temperature=1.5)
    with pytest.raises(ValueError):
        CompletionRequest(messages=(), max_tokens=0)
    with pytest.raises(ValueError):
        ChatMessage("tool", "nope")


@pytest.mark.anyio
async def test_negative_retry_count_still_makes_one_attempt():
    provider = ScriptedProvider(httpx.Response(503))
    client = _client(provider, max_retries=-1)

    with pytest.raises(TransportError) as excinfo:
        await client.complete(_request())

    assert len(provider.requests) == 1
    assert excinfo.value.status_code == 503
    await client.close()


@pytest.mark.anyio
async def test_attempt_is_bounded_by_total_timeout():
    async def stalled(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return _reply("too late")

    client = _client(stalled, max_retries=0)
    request = build_request([ChatMessage("user", "hi")], model="deepseek-chat", timeout_seconds=0.2)

    started = time.monotonic()
    with pytest.raises(TransportError):
        await client.complete(request)

    assert time.monotonic() - started < 2
    await client.close()
