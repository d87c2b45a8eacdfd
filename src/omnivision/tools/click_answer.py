import logging
from typing import Any, Dict

from pydantic import BaseModel, field_validator

from .base import BaseTool, ToolInfo, ToolParameter
from .overlay import AnnotationOverlay

logger = logging.getLogger(__name__)


class ClickAnswerArgs(BaseModel):
    x: float
    y: float
    label: str

    @field_validator("x", "y")
    @classmethod
    def _clamp_percent(cls, v: float) -> float:
        # Keep the marker on screen even if the agent overshoots.
        return min(100.0, max(0.0, v))


class ClickAnswerTool(BaseTool):
    """Lets the agent point at an answer or UI element on the shared screen."""

    def __init__(self, overlay: AnnotationOverlay):
        self._overlay = overlay

    def get_info(self) -> ToolInfo:
        return ToolInfo(
            name="click_answer",
            description='Autonomous interaction: Highlight or "click" a specific answer or UI element visible on the screen.',
            parameters=[
                ToolParameter(
                    name="x",
                    type="number",
                    description="The horizontal coordinate (0-100) relative to screen width.",
                ),
                ToolParameter(
                    name="y",
                    type="number",
                    description="The vertical coordinate (0-100) relative to screen height.",
                ),
                ToolParameter(
                    name="label",
                    type="string",
                    description="A text label describing the answer being clicked.",
                ),
            ],
        )

    def execute(self, **kwargs) -> Dict[str, Any]:
        args = ClickAnswerArgs(**kwargs)
        self._overlay.add(args.x, args.y, args.label)
        return {"result": "ok"}
