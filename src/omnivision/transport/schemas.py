"""Gemini Live wire schemas (JSON over WebSocket)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python; unknown fields ignored."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# --- Inbound ---------------------------------------------------------------

class Transcription(WireModel):
    text: Optional[str] = None


class InlineData(WireModel):
    data: Optional[str] = None
    mime_type: Optional[str] = None


class Part(WireModel):
    text: Optional[str] = None
    inline_data: Optional[InlineData] = None


class ModelTurn(WireModel):
    parts: List[Part] = Field(default_factory=list)


class ServerContent(WireModel):
    model_turn: Optional[ModelTurn] = None
    output_transcription: Optional[Transcription] = None
    input_transcription: Optional[Transcription] = None
    interrupted: bool = False
    turn_complete: bool = False


class FunctionCall(WireModel):
    id: str = ""
    name: str = ""
    args: Dict[str, Any] = Field(default_factory=dict)


class ToolCall(WireModel):
    function_calls: List[FunctionCall] = Field(default_factory=list)


class LiveServerMessage(WireModel):
    """One inbound message; only the fields the router inspects are modelled."""
    server_content: Optional[ServerContent] = None
    tool_call: Optional[ToolCall] = None
    setup_complete: Optional[Dict[str, Any]] = None

    @property
    def output_text(self) -> Optional[str]:
        sc = self.server_content
        if sc and sc.output_transcription and sc.output_transcription.text:
            return sc.output_transcription.text
        return None

    @property
    def input_text(self) -> Optional[str]:
        sc = self.server_content
        if sc and sc.input_transcription and sc.input_transcription.text:
            return sc.input_transcription.text
        return None

    @property
    def audio_data(self) -> Optional[str]:
        """Base64 audio of the first model-turn part, if any."""
        sc = self.server_content
        if not sc or not sc.model_turn or not sc.model_turn.parts:
            return None
        inline = sc.model_turn.parts[0].inline_data
        return inline.data if inline and inline.data else None

    @property
    def interrupted(self) -> bool:
        return bool(self.server_content and self.server_content.interrupted)

    @property
    def function_calls(self) -> List[FunctionCall]:
        return list(self.tool_call.function_calls) if self.tool_call else []


# --- Outbound --------------------------------------------------------------

class Blob(WireModel):
    data: str
    mime_type: str


class RealtimeInput(WireModel):
    """sendRealtimeInput payload: {"media": {"data", "mimeType"}}."""
    media: Blob

    def to_wire(self) -> Dict[str, Any]:
        key = "audio" if self.media.mime_type.startswith("audio/") else "video"
        return {"realtimeInput": {key: self.media.to_wire()}}


class FunctionResponse(WireModel):
    id: str
    name: str
    response: Dict[str, Any] = Field(default_factory=dict)


class ToolResponseMessage(WireModel):
    """sendToolResponse payload: {"functionResponses": [...]}."""
    function_responses: List[FunctionResponse]

    def to_wire(self) -> Dict[str, Any]:
        return {"toolResponse": super().to_wire()}


class LiveConfig(WireModel):
    """Session setup: what the agent is, how it speaks, what it may call."""
    system_instruction: str = ""
    voice: str = "Puck"
    function_declarations: List[Dict[str, Any]] = Field(default_factory=list)
    input_transcription: bool = True
    output_transcription: bool = True

    def to_setup(self, model: str) -> Dict[str, Any]:
        if not model.startswith("models/"):
            model = f"models/{model}"
        setup: Dict[str, Any] = {
            "model": model,
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": self.voice}}
                },
            },
        }
        if self.system_instruction:
            setup["systemInstruction"] = {"parts": [{"text": self.system_instruction}]}
        if self.function_declarations:
            setup["tools"] = [{"functionDeclarations": self.function_declarations}]
        if self.input_transcription:
            setup["inputAudioTranscription"] = {}
        if self.output_transcription:
            setup["outputAudioTranscription"] = {}
        return {"setup": setup}
