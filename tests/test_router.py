"""Tests for InboundRouter."""

import pytest
from unittest.mock import MagicMock

from omnivision.audio.codec import b64encode, encode
from omnivision.core.events import ToolInvocation
from omnivision.core.router import InboundRouter
from omnivision.core.transcript import TranscriptWindow
from omnivision.transport.schemas import LiveServerMessage


def _message(**payload) -> LiveServerMessage:
    return LiveServerMessage.model_validate(payload)


def _audio(samples: int = 480) -> str:
    return b64encode(encode([0.1] * samples))


@pytest.fixture
def transcript():
    return TranscriptWindow()


@pytest.fixture
def scheduler():
    return MagicMock()


@pytest.fixture
def tools():
    return MagicMock()


@pytest.fixture
def router(transcript, scheduler, tools):
    return InboundRouter(transcript, scheduler, tools)


def test_output_transcription_wins_over_input(router, transcript):
    router.route(_message(serverContent={
        "outputTranscription": {"text": "I see a login form"},
        "inputTranscription": {"text": "what is this"},
    }))

    entries = transcript.entries()
    assert len(entries) == 1
    assert entries[0].text == "I see a login form"
    assert entries[0].sender == "model"


def test_input_transcription_is_user(router, transcript):
    router.route(_message(serverContent={"inputTranscription": {"text": "hello"}}))

    assert [(e.text, e.sender) for e in transcript] == [("hello", "user")]


def test_audio_is_decoded_and_scheduled(router, scheduler):
    router.route(_message(serverContent={
        "modelTurn": {"parts": [{"inlineData": {"mimeType": "audio/pcm;rate=24000", "data": _audio(480)}}]},
    }))

    scheduler.schedule.assert_called_once()
    buf = scheduler.schedule.call_args.args[0]
    assert buf.sample_rate == 24000
    assert buf.frames == 480


def test_undecodable_audio_is_dropped(router, scheduler, transcript):
    router.route(_message(serverContent={
        "outputTranscription": {"text": "still here"},
        "modelTurn": {"parts": [{"inlineData": {"data": b64encode(b"\x00\x01\x02")}}]},
    }))

    scheduler.schedule.assert_not_called()
    assert len(transcript) == 1


def test_interrupt_reaches_scheduler(router, scheduler):
    router.route(_message(serverContent={"interrupted": True}))
    scheduler.interrupt.assert_called_once()


def test_tool_calls_are_dispatched(router, tools):
    router.route(_message(toolCall={"functionCalls": [
        {"id": "abc", "name": "click_answer", "args": {"x": 42, "y": 17, "label": "Submit"}},
        {"id": "def", "name": "click_answer", "args": {"x": 1, "y": 2, "label": "Cancel"}},
    ]}))

    assert tools.dispatch.call_args_list[0].args[0] == ToolInvocation(
        id="abc", name="click_answer", args={"x": 42, "y": 17, "label": "Submit"}
    )
    assert tools.dispatch.call_count == 2


def test_combined_message_is_handled_in_order(router, transcript, scheduler, tools):
    router.route(_message(
        serverContent={
            "outputTranscription": {"text": "there"},
            "modelTurn": {"parts": [{"inlineData": {"data": _audio()}}]},
            "interrupted": True,
        },
        toolCall={"functionCalls": [{"id": "x1", "name": "click_answer", "args": {}}]},
    ))

    assert len(transcript) == 1
    assert [c[0] for c in scheduler.method_calls] == ["schedule", "interrupt"]
    tools.dispatch.assert_called_once()


def test_empty_message_does_nothing(router, transcript, scheduler, tools):
    router.route(_message(setupComplete={}))

    assert len(transcript) == 0
    assert scheduler.method_calls == []
    tools.dispatch.assert_not_called()
