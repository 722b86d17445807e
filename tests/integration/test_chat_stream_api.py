"""Integration tests for the streaming chat API endpoint.

This module tests the SSE streaming chat endpoint including:
- The event sequence of a turn with a tool call
- Warning events for unmapped argument keys
- The no-model-configured and model error paths
"""

import json

import pytest
from httpx import ASGITransport, AsyncClient

from tests.fakes import reply, tool_call
from toolrelay import create_app
from toolrelay.errors import ModelError


def parse_sse(text: str) -> list[dict]:
    """Parse an SSE response body into event/data dicts."""
    events = []
    # Normalize line endings and split by double newline
    normalized_text = text.replace("\r\n", "\n")
    for block in normalized_text.strip().split("\n\n"):
        if not block.strip():
            continue
        event_type = None
        event_data = None
        for part in block.split("\n"):
            if part.startswith("event:"):
                event_type = part.split(":", 1)[1].strip()
            elif part.startswith("data:"):
                event_data = part.split(":", 1)[1].strip()
        if event_type and event_data:
            events.append({"event": event_type, "data": json.loads(event_data)})
    return events


@pytest.mark.asyncio
async def test_stream_chat_with_tool_call(async_client: AsyncClient, chat_model):
    """Test the event sequence of a streamed turn with one tool call."""
    chat_model.responses = [
        reply("", tool_call("getWeather", {"location": "Paris"}, "call-1")),
        reply("It is 18°C and sunny in Paris."),
    ]

    response = await async_client.post("/api/v1/chat/stream", json={"message": "Weather in Paris?"})
    assert response.status_code == 200

    events = parse_sse(response.text)

    assert [e["event"] for e in events] == [
        "state",
        "state",
        "tool_call",
        "tool_result",
        "state",
        "message_complete",
        "done",
    ]
    assert [e["data"]["state"] for e in events if e["event"] == "state"] == [
        "calling_model",
        "executing_tools",
        "calling_model",
    ]

    tool_call_event = events[2]["data"]
    assert tool_call_event == {"id": "call-1", "tool_name": "getWeather", "arguments": {"location": "Paris"}}

    tool_result_event = events[3]["data"]
    assert tool_result_event["id"] == "call-1"
    assert tool_result_event["result"] == "18°C and sunny in Paris"
    assert tool_result_event["served_from_cache"] is False

    complete = events[5]["data"]["response"]
    assert complete["message"]["content"] == "It is 18°C and sunny in Paris."
    assert complete["iterations"] == 1
    assert complete["state"] == "done"

    thread_response = await async_client.get("/api/v1/chat/thread")
    assert events[-1]["data"]["thread_id"] == thread_response.json()["thread_id"]


@pytest.mark.asyncio
async def test_stream_chat_without_tool_calls(async_client: AsyncClient, chat_model):
    """Test a streamed turn answered directly by the model."""
    chat_model.responses = [reply("Hello there!")]

    response = await async_client.post("/api/v1/chat/stream", json={"message": "Hi!"})

    events = parse_sse(response.text)
    assert [e["event"] for e in events] == ["state", "message_complete", "done"]
    assert events[1]["data"]["response"]["message"]["content"] == "Hello there!"


@pytest.mark.asyncio
async def test_stream_chat_emits_warnings(async_client: AsyncClient, chat_model):
    """Test that normalization warnings are streamed as warning events."""
    chat_model.responses = [
        reply("", tool_call("getWeather", {"location": "Paris", "banana": "yellow"})),
        reply("Sunny."),
    ]

    response = await async_client.post("/api/v1/chat/stream", json={"message": "Weather?"})

    events = parse_sse(response.text)
    warnings = [e for e in events if e["event"] == "warning"]
    assert len(warnings) == 1
    assert warnings[0]["data"]["tool_name"] == "getWeather"
    assert "banana" in warnings[0]["data"]["message"]


@pytest.mark.asyncio
async def test_stream_chat_model_error(async_client: AsyncClient, chat_model):
    """Test that a model failure still completes the stream."""
    chat_model.responses = [ModelError("Stream ended without completion marker")]

    response = await async_client.post("/api/v1/chat/stream", json={"message": "Hi"})

    events = parse_sse(response.text)
    complete = [e for e in events if e["event"] == "message_complete"]
    assert complete[0]["data"]["response"]["message"]["content"] == (
        "Error: Stream ended without completion marker"
    )
    assert events[-1]["event"] == "done"


@pytest.mark.asyncio
async def test_stream_chat_without_model_configuration(test_settings, model_factory):
    """Test that streaming without any model configuration returns 409."""
    settings = test_settings.model_copy(update={"default_model": None})
    app = create_app(settings=settings, model_factory=model_factory)

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/api/v1/chat/stream", json={"message": "Hi"})

    assert response.status_code == 409
    assert response.json()["detail"]["error"]["code"] == "model_not_configured"
