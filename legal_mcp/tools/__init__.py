"""Tool registry and built-in legal tools."""

from .legal import LegalTools, create_legal_tool_registry
from .registry import FunctionToolRegistry, ToolRegistry, error_result, text_result

__all__ = [
    "FunctionToolRegistry",
    "LegalTools",
    "ToolRegistry",
    "create_legal_tool_registry",
    "error_result",
    "text_result",
]
