from abc import ABC, abstractmethod
from typing import Any, Dict, List
from pydantic import BaseModel


class ToolParameter(BaseModel):
    name: str
    type: str
    description: str
    required: bool = True


class ToolInfo(BaseModel):
    name: str
    description: str
    parameters: List[ToolParameter]

    def to_function_declaration(self) -> Dict[str, Any]:
        """Gemini Live function declaration for this tool."""
        properties = {
            p.name: {"type": p.type.upper(), "description": p.description}
            for p in self.parameters
        }
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "OBJECT",
                "properties": properties,
                "required": [p.name for p in self.parameters if p.required],
            },
        }


class BaseTool(ABC):
    @abstractmethod
    def get_info(self) -> ToolInfo:
        pass

    @abstractmethod
    def execute(self, **kwargs) -> Dict[str, Any]:
        """Run the tool and return the response payload. Must not block."""
        pass
