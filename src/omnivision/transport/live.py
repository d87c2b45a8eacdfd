"""Raw WebSocket client for the Gemini Live API."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import websockets
from pydantic import ValidationError

from ..core.errors import TransportError
from .schemas import LiveConfig, LiveServerMessage, RealtimeInput, ToolResponseMessage

logger = logging.getLogger("LiveClient")

GEMINI_WEBSOCKET_HOST = "generativelanguage.googleapis.com"
DEFAULT_MODEL = "gemini-2.5-flash-native-audio-preview-09-2025"
SETUP_TIMEOUT_S = 10.0


@dataclass
class LiveCallbacks:
    on_open: Callable[[], None]
    on_message: Callable[[LiveServerMessage], None]
    on_error: Callable[[TransportError], None]
    on_close: Callable[[], None]


class LiveSession:
    """
    An open bidirectional session.

    Inbound messages are delivered in order to on_message from a single receive
    task. Exactly one of on_error / on_close fires when the remote side ends the
    session; neither fires after a local close().
    """

    def __init__(self, ws: Any, callbacks: LiveCallbacks):
        self._ws = ws
        self._callbacks = callbacks
        self._closed = False
        self._receive_task: Optional[asyncio.Task] = None

    @property
    def is_open(self) -> bool:
        return not self._closed

    def start(self) -> None:
        loop = asyncio.get_running_loop()
        loop.call_soon(self._fire_open)
        self._receive_task = loop.create_task(self._receive_loop())

    def _fire_open(self) -> None:
        if not self._closed:
            self._callbacks.on_open()

    async def _receive_loop(self) -> None:
        error: Optional[Exception] = None
        try:
            async for raw in self._ws:
                if self._closed:
                    break
                try:
                    message = LiveServerMessage.model_validate(json.loads(raw))
                except (ValueError, ValidationError) as e:
                    logger.warning("Ignoring malformed message: %s", e)
                    continue
                self._callbacks.on_message(message)
        except websockets.ConnectionClosedOK:
            pass
        except Exception as e:
            error = e

        if self._closed:
            return
        self._closed = True
        if error is not None:
            logger.error("Live session error: %s", error)
            self._callbacks.on_error(TransportError(str(error)))
        else:
            logger.info("Live session closed by remote")
            self._callbacks.on_close()

    async def send_realtime_input(self, payload: Dict[str, Any]) -> None:
        await self._send(RealtimeInput.model_validate(payload).to_wire())

    async def send_tool_response(self, payload: Dict[str, Any]) -> None:
        await self._send(ToolResponseMessage.model_validate(payload).to_wire())

    async def _send(self, message: Dict[str, Any]) -> None:
        if self._closed:
            raise TransportError("Live session is closed")
        await self._ws.send(json.dumps(message))

    def close(self) -> None:
        """Close locally. Callbacks are detached; safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        task = self._receive_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        asyncio.ensure_future(self._close_ws())

    async def _close_ws(self) -> None:
        try:
            await self._ws.close()
        except Exception as e:
            logger.debug("Error closing websocket: %s", e)
        logger.info("Live session closed")


class LiveClient:
    """Connects to BidiGenerateContent and completes the setup handshake."""

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, host: str = GEMINI_WEBSOCKET_HOST):
        self._api_key = api_key
        self._model = model
        self._host = host

    def _build_websocket_url(self) -> str:
        return (
            f"wss://{self._host}/ws/"
            f"google.ai.generativelanguage.v1beta.GenerativeService.BidiGenerateContent"
            f"?key={self._api_key}"
        )

    async def connect(self, config: LiveConfig, callbacks: LiveCallbacks) -> LiveSession:
        """Open the socket, send setup, wait for setupComplete. Raises TransportError."""
        try:
            ws = await websockets.connect(self._build_websocket_url(), max_size=None)
        except Exception as e:
            raise TransportError(f"Could not reach Gemini Live: {e}") from e

        try:
            await ws.send(json.dumps(config.to_setup(self._model)))
            raw = await asyncio.wait_for(ws.recv(), timeout=SETUP_TIMEOUT_S)
            response = json.loads(raw)
        except Exception as e:
            await ws.close()
            raise TransportError(f"Session setup failed: {e}") from e

        if "setupComplete" not in response:
            await ws.close()
            raise TransportError(f"Unexpected setup response: {json.dumps(response)[:200]}")

        logger.info("Connected to Gemini Live (%s)", self._model)
        session = LiveSession(ws, callbacks)
        session.start()
        return session
