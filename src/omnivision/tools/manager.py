import logging
from typing import Any, Callable, Dict, List

from ..core.events import ToolInvocation, ToolResponse
from .base import BaseTool, ToolInfo
from .click_answer import ClickAnswerTool
from .overlay import AnnotationOverlay

logger = logging.getLogger(__name__)


class ToolManager:
    """
    Declares the tool contract to the agent and answers every invocation.

    Each invocation yields exactly one ToolResponse carrying the invocation id.
    The response is sent as soon as the tool returns; delivery failures are
    logged and never retried.
    """

    def __init__(self, overlay: AnnotationOverlay, respond: Callable[[ToolResponse], None]):
        self.tools: Dict[str, BaseTool] = {}
        self._respond = respond
        self.register_tool(ClickAnswerTool(overlay))

    def register_tool(self, tool: BaseTool):
        info = tool.get_info()
        self.tools[info.name] = tool
        logger.info(f"Registered tool: {info.name}")

    def get_tool_info(self) -> List[ToolInfo]:
        return [tool.get_info() for tool in self.tools.values()]

    def get_function_declarations(self) -> List[Dict[str, Any]]:
        return [info.to_function_declaration() for info in self.get_tool_info()]

    def execute_tool(self, tool_name: str, args: Dict[str, Any]) -> Dict[str, Any]:
        if tool_name not in self.tools:
            error_msg = f"Tool '{tool_name}' not found. Available tools: {list(self.tools.keys())}"
            logger.error(error_msg)
            return {
                "error": error_msg,
                "available_tools": list(self.tools.keys())
            }

        try:
            logger.info(f"Executing tool: {tool_name} with parameters: {args}")
            return self.tools[tool_name].execute(**args)
        except Exception as e:
            error_msg = f"Error executing tool '{tool_name}': {str(e)}"
            logger.error(error_msg)
            return {
                "error": error_msg,
                "tool_name": tool_name,
            }

    def dispatch(self, invocation: ToolInvocation) -> ToolResponse:
        try:
            result = self.execute_tool(invocation.name, dict(invocation.args))
        except Exception as e:
            logger.error("Tool call %s failed: %s", invocation.id, e)
            result = {"error": f"Error executing tool '{invocation.name}': {e}", "tool_name": invocation.name}
        response = ToolResponse(id=invocation.id, name=invocation.name, result=result)
        try:
            self._respond(response)
        except Exception as e:
            logger.warning("Failed to send tool response %s: %s", invocation.id, e)
        return response
