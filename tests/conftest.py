import asyncio
import os
from typing import Any, Callable, Dict, List, Optional

import numpy as np
import pytest
from PIL import Image

from omnivision.audio.output.types import AudioBuffer
from omnivision.config.settings import OmniVisionConfig
from omnivision.core.errors import MediaAcquisitionFailed


@pytest.fixture
def setup_test_env():
    """Setup test environment variables"""
    original_env = os.environ.copy()

    for key in ("GEMINI_API_KEY", "API_KEY", "GEMINI_MODEL", "GEMINI_VOICE", "SYSTEM_INSTRUCTION",
                "INPUT_DEVICE", "OUTPUT_DEVICE", "SCREEN_MONITOR", "LOG_LEVEL"):
        os.environ.pop(key, None)

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


def make_buffer(seconds: float, sample_rate: int = 24000, value: float = 0.1) -> AudioBuffer:
    frames = int(round(seconds * sample_rate))
    samples = np.full((frames, 1), value, dtype=np.float32)
    return AudioBuffer(samples=samples, sample_rate=sample_rate)


class FakeTimer:
    """Manual clock standing in for loop.call_later."""

    class Handle:
        def __init__(self, when: float, callback: Callable[[], None]):
            self.when = when
            self.callback = callback
            self.cancelled = False

        def cancel(self):
            self.cancelled = True

    def __init__(self):
        self.now = 0.0
        self.handles: List["FakeTimer.Handle"] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> "FakeTimer.Handle":
        handle = FakeTimer.Handle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted((h for h in self.handles if h.when <= self.now), key=lambda h: h.when)
        for handle in due:
            self.handles.remove(handle)
            if not handle.cancelled:
                handle.callback()


class FakeSource:
    def __init__(self):
        self.stopped = False

    def stop(self):
        self.stopped = True


class FakeOutput:
    """Output clock that only moves when the test says so."""

    def __init__(self, sample_rate: int = 24000):
        self.sample_rate = sample_rate
        self.current_time = 0.0
        self.played: List[Dict[str, Any]] = []
        self.is_open = False
        self.open_calls = 0
        self.close_calls = 0

    def open(self):
        self.open_calls += 1
        self.is_open = True

    def close(self):
        self.close_calls += 1
        self.is_open = False
        self.current_time = 0.0

    def play(self, buffer, when, on_ended):
        source = FakeSource()
        self.played.append({"buffer": buffer, "when": when, "on_ended": on_ended, "source": source})
        return source

    def finish(self, index: int) -> None:
        self.played[index]["on_ended"]()


class FakeScreen:
    def __init__(self, size=(1920, 1080), fail: Optional[Exception] = None):
        self.size = size
        self.fail = fail
        self.is_open = False
        self.on_ended: Optional[Callable[[], None]] = None
        self.stop_calls = 0

    @property
    def ready(self) -> bool:
        return self.is_open

    def set_on_ended(self, callback):
        self.on_ended = callback

    def open(self):
        if self.fail is not None:
            raise self.fail
        self.is_open = True

    async def grab(self):
        if not self.is_open:
            return None
        return Image.new("RGB", self.size, (40, 80, 120))

    def stop(self):
        self.stop_calls += 1
        self.is_open = False

    def end(self):
        """Simulate the user revoking the share from outside the app."""
        self.stop()
        if self.on_ended is not None:
            self.on_ended()


class FakeMic:
    def __init__(self, send, fail: Optional[Exception] = None):
        self.send = send
        self.fail = fail
        self.is_open = False
        self.is_armed = False
        self.close_calls = 0

    def open(self):
        if self.fail is not None:
            raise self.fail
        self.is_open = True

    def arm(self):
        self.is_armed = True

    def close(self):
        self.close_calls += 1
        self.is_open = False
        self.is_armed = False


class FakeLiveSession:
    def __init__(self, callbacks):
        self.callbacks = callbacks
        self.realtime: List[dict] = []
        self.tool_responses: List[dict] = []
        self.close_calls = 0

    @property
    def is_open(self) -> bool:
        return self.close_calls == 0

    async def send_realtime_input(self, payload):
        self.realtime.append(payload)

    async def send_tool_response(self, payload):
        self.tool_responses.append(payload)

    def close(self):
        self.close_calls += 1


class FakeLiveClient:
    """Mimics LiveClient.connect: on_open is posted to the loop after the session is returned."""

    def __init__(self, fail: Optional[Exception] = None, gate: Optional[asyncio.Event] = None):
        self.fail = fail
        self.gate = gate
        self.connect_calls = 0
        self.sessions: List[FakeLiveSession] = []
        self.configs = []

    def __call__(self, api_key: str, model: str) -> "FakeLiveClient":
        self.api_key = api_key
        self.model = model
        return self

    async def connect(self, config, callbacks) -> FakeLiveSession:
        self.connect_calls += 1
        self.configs.append(config)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail is not None:
            raise self.fail
        session = FakeLiveSession(callbacks)
        self.sessions.append(session)
        asyncio.get_running_loop().call_soon(callbacks.on_open)
        return session


@pytest.fixture
def fake_timer():
    return FakeTimer()


@pytest.fixture
def fake_output():
    return FakeOutput()


@pytest.fixture
def fake_screen():
    return FakeScreen()


@pytest.fixture
def config():
    return OmniVisionConfig(api_key="test_key_12345")


@pytest.fixture
def denied_screen():
    return FakeScreen(fail=MediaAcquisitionFailed("Screen sharing denied or failed"))
