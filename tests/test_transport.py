"""Tests for the Gemini Live client and wire schemas."""

import asyncio
import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from omnivision.core.errors import TransportError
from omnivision.core.events import MediaPacket, ToolResponse
from omnivision.transport import LiveCallbacks, LiveClient, LiveConfig, LiveServerMessage
from omnivision.transport.schemas import RealtimeInput, ToolResponseMessage

MODULE = "omnivision.transport.live"


def _mock_ws_connect(mock_ws):
    """Create a patch for websockets.connect that returns mock_ws as an awaitable."""
    return patch(f"{MODULE}.websockets.connect", AsyncMock(return_value=mock_ws))


def _make_async_iter_ws(items, error=None):
    """Create a mock WebSocket that yields items via async for, then optionally fails."""
    mock_ws = AsyncMock()
    mock_ws.recv.return_value = json.dumps({"setupComplete": {}})

    async def async_iter():
        for item in items:
            yield item
        if error is not None:
            raise error

    mock_ws.__aiter__ = lambda self: async_iter()
    return mock_ws


class Recorder:
    def __init__(self):
        self.events = []
        self.messages = []

    def callbacks(self) -> LiveCallbacks:
        return LiveCallbacks(
            on_open=lambda: self.events.append("open"),
            on_message=self.messages.append,
            on_error=lambda e: self.events.append(("error", e)),
            on_close=lambda: self.events.append("close"),
        )


async def _drain():
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def client():
    return LiveClient(api_key="test_key_12345", model="gemini-test")


def test_websocket_url_carries_key(client):
    url = client._build_websocket_url()
    assert url.startswith("wss://generativelanguage.googleapis.com/ws/")
    assert "BidiGenerateContent" in url
    assert url.endswith("?key=test_key_12345")


def test_setup_message():
    config = LiveConfig(
        system_instruction="Watch the screen.",
        voice="Puck",
        function_declarations=[{"name": "click_answer"}],
    )

    setup = config.to_setup("gemini-test")["setup"]

    assert setup["model"] == "models/gemini-test"
    assert setup["generationConfig"]["responseModalities"] == ["AUDIO"]
    voice = setup["generationConfig"]["speechConfig"]["voiceConfig"]["prebuiltVoiceConfig"]
    assert voice == {"voiceName": "Puck"}
    assert setup["systemInstruction"] == {"parts": [{"text": "Watch the screen."}]}
    assert setup["tools"] == [{"functionDeclarations": [{"name": "click_answer"}]}]
    assert setup["inputAudioTranscription"] == {}
    assert setup["outputAudioTranscription"] == {}


def test_realtime_input_wire_format():
    audio = RealtimeInput.model_validate(MediaPacket.audio(b"\x00\x00").to_realtime_input()).to_wire()
    assert audio == {"realtimeInput": {"audio": {"data": "AAA=", "mimeType": "audio/pcm;rate=16000"}}}

    frame = RealtimeInput.model_validate(MediaPacket.frame(b"\xff\xd8").to_realtime_input()).to_wire()
    assert frame["realtimeInput"]["video"]["mimeType"] == "image/jpeg"


def test_tool_response_wire_format():
    response = ToolResponse(id="abc", name="click_answer", result={"result": "ok"})
    wire = ToolResponseMessage.model_validate({"functionResponses": [response.to_wire()]}).to_wire()

    assert wire == {"toolResponse": {"functionResponses": [
        {"id": "abc", "name": "click_answer", "response": {"result": "ok"}}
    ]}}


def test_server_message_accessors():
    msg = LiveServerMessage.model_validate({
        "serverContent": {
            "modelTurn": {"parts": [{"inlineData": {"data": "AAA=", "mimeType": "audio/pcm"}}]},
            "outputTranscription": {"text": "hi"},
            "interrupted": True,
            "someFutureField": 1,
        },
        "toolCall": {"functionCalls": [{"id": "1", "name": "click_answer", "args": {"x": 1}}]},
    })

    assert msg.audio_data == "AAA="
    assert msg.output_text == "hi"
    assert msg.input_text is None
    assert msg.interrupted
    assert msg.function_calls[0].args == {"x": 1}


@pytest.mark.asyncio
async def test_connect_sends_setup_then_opens(client, recorder):
    mock_ws = _make_async_iter_ws([])
    with _mock_ws_connect(mock_ws) as connect:
        session = await client.connect(LiveConfig(), recorder.callbacks())

        assert connect.call_args.args[0] == client._build_websocket_url()
        sent = json.loads(mock_ws.send.call_args_list[0].args[0])
        assert sent["setup"]["model"] == "models/gemini-test"

        await _drain()
        assert recorder.events[0] == "open"
        assert recorder.events[-1] == "close"
        assert not session.is_open


@pytest.mark.asyncio
async def test_messages_are_delivered_in_order(client, recorder):
    frames = [
        json.dumps({"serverContent": {"outputTranscription": {"text": "one"}}}),
        "not json",
        json.dumps({"serverContent": {"outputTranscription": {"text": "two"}}}),
    ]
    mock_ws = _make_async_iter_ws(frames)
    with _mock_ws_connect(mock_ws):
        await client.connect(LiveConfig(), recorder.callbacks())
        await _drain()

    assert [m.output_text for m in recorder.messages] == ["one", "two"]


@pytest.mark.asyncio
async def test_receive_failure_fires_on_error_only(client, recorder):
    mock_ws = _make_async_iter_ws([], error=ConnectionResetError("reset by peer"))
    with _mock_ws_connect(mock_ws):
        await client.connect(LiveConfig(), recorder.callbacks())
        await _drain()

    errors = [e for e in recorder.events if isinstance(e, tuple)]
    assert len(errors) == 1
    assert isinstance(errors[0][1], TransportError)
    assert "close" not in recorder.events


@pytest.mark.asyncio
async def test_connect_failure_raises_transport_error(client, recorder):
    with patch(f"{MODULE}.websockets.connect", AsyncMock(side_effect=OSError("unreachable"))):
        with pytest.raises(TransportError):
            await client.connect(LiveConfig(), recorder.callbacks())
    assert recorder.events == []


@pytest.mark.asyncio
async def test_rejected_setup_raises_and_closes(client, recorder):
    mock_ws = _make_async_iter_ws([])
    mock_ws.recv.return_value = json.dumps({"error": {"message": "API key not valid"}})
    with _mock_ws_connect(mock_ws):
        with pytest.raises(TransportError):
            await client.connect(LiveConfig(), recorder.callbacks())
    mock_ws.close.assert_awaited()


@pytest.mark.asyncio
async def test_sends_are_translated_to_wire_messages(client, recorder):
    mock_ws = _make_async_iter_ws([])
    mock_ws.__aiter__ = lambda self: _forever()
    with _mock_ws_connect(mock_ws):
        session = await client.connect(LiveConfig(), recorder.callbacks())
        await session.send_realtime_input(MediaPacket.audio(b"\x00\x00").to_realtime_input())
        await session.send_tool_response({"functionResponses": [{"id": "abc", "name": "click_answer", "response": {"result": "ok"}}]})
        session.close()

    sent = [json.loads(c.args[0]) for c in mock_ws.send.call_args_list[1:]]
    assert "realtimeInput" in sent[0]
    assert sent[1]["toolResponse"]["functionResponses"][0]["id"] == "abc"


@pytest.mark.asyncio
async def test_local_close_is_silent_and_blocks_sends(client, recorder):
    mock_ws = _make_async_iter_ws([])
    mock_ws.__aiter__ = lambda self: _forever()
    with _mock_ws_connect(mock_ws):
        session = await client.connect(LiveConfig(), recorder.callbacks())
        await asyncio.sleep(0)
        session.close()
        session.close()
        await _drain()

        with pytest.raises(TransportError):
            await session.send_realtime_input(MediaPacket.audio(b"\x00\x00").to_realtime_input())

    assert recorder.events == ["open"]
    mock_ws.close.assert_awaited_once()


async def _forever():
    await asyncio.Event().wait()
    yield ""
