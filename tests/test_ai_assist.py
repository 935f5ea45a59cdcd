# tests/test_ai_assist.py
import json

import httpx
import pytest

from ai_assist import (REPLY_EMPTY, REPLY_FAILED, REPLY_UNAVAILABLE, SUMMARY_FAILED, SUMMARY_UNAVAILABLE,
                       AIAssist, AIStatus, extract_text)


def _gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def _assist(handler) -> AIAssist:
    return AIAssist(api_key="test-key", model="gemini-test", base_url="https://ai.example/v1beta",
                    transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_missing_key_is_unavailable() -> None:
    calls = []
    assist = AIAssist(api_key="", transport=httpx.MockTransport(lambda r: calls.append(r)))

    reply = await assist.generate_reply("Title", "Body")
    summary = await assist.summarize_thread("Body", ["a: hi"])

    assert reply.status == AIStatus.UNAVAILABLE
    assert reply.text == REPLY_UNAVAILABLE
    assert summary.status == AIStatus.UNAVAILABLE
    assert summary.text == SUMMARY_UNAVAILABLE
    assert not reply.ok
    assert calls == []


@pytest.mark.asyncio
async def test_generate_reply_success() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_gemini_reply("  Great question!  "))

    result = await _assist(handler).generate_reply("Thoughts on React 19", "Server Components?")

    assert result.ok
    assert result.text == "Great question!"
    assert result.reason is None
    assert seen["url"].path == "/v1beta/models/gemini-test:generateContent"
    assert seen["url"].params["key"] == "test-key"
    prompt = seen["body"]["contents"][0]["parts"][0]["text"]
    assert "Thoughts on React 19" in prompt
    assert "Server Components?" in prompt


@pytest.mark.asyncio
async def test_summarize_thread_sends_comments() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["prompt"] = json.loads(request.content)["contents"][0]["parts"][0]["text"]
        return httpx.Response(200, json=_gemini_reply("- point one"))

    result = await _assist(handler).summarize_thread("Main post", ["alice: yes", "bob: no"])

    assert result.status == AIStatus.SUCCESS
    assert result.text == "- point one"
    assert "Main post" in seen["prompt"]
    assert "- alice: yes\n- bob: no" in seen["prompt"]


@pytest.mark.asyncio
async def test_error_status_falls_back() -> None:
    result = await _assist(lambda r: httpx.Response(500, json={"error": "boom"})).generate_reply("T", "B")
    assert result.status == AIStatus.FAILED
    assert result.text == REPLY_FAILED
    assert "500" in result.reason


@pytest.mark.asyncio
async def test_network_error_falls_back() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await _assist(handler).summarize_thread("B", [])
    assert result.status == AIStatus.FAILED
    assert result.text == SUMMARY_FAILED
    assert "ConnectError" in result.reason


@pytest.mark.asyncio
async def test_non_json_and_empty_responses_fall_back() -> None:
    garbage = await _assist(lambda r: httpx.Response(200, text="<html>")).generate_reply("T", "B")
    assert garbage.status == AIStatus.FAILED
    assert garbage.text == REPLY_FAILED

    empty = await _assist(lambda r: httpx.Response(200, json={"candidates": []})).generate_reply("T", "B")
    assert empty.status == AIStatus.FAILED
    assert empty.text == REPLY_EMPTY


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [
    {"parts": None},
    {"parts": [{"text": None}]},
    {"parts": "not-a-list"},
])
async def test_malformed_parts_fall_back(content: dict) -> None:
    result = await _assist(lambda r: httpx.Response(200, json={"candidates": [{"content": content}]})) \
        .generate_reply("T", "B")
    assert result.status == AIStatus.FAILED
    assert result.text == REPLY_EMPTY


def test_extract_text() -> None:
    assert extract_text(_gemini_reply("hi")) == "hi"
    assert extract_text({"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}) == "ab"
    assert extract_text({}) == ""
    assert extract_text(None) == ""
