from .base import BaseTool, ToolInfo, ToolParameter
from .click_answer import ClickAnswerTool
from .manager import ToolManager
from .overlay import AnnotationOverlay

__all__ = [
    "BaseTool",
    "ToolInfo",
    "ToolParameter",
    "ClickAnswerTool",
    "ToolManager",
    "AnnotationOverlay",
]
