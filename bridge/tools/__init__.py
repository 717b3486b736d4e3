"""Tool system — registry and executor."""
from .registry import ToolDescriptor, ToolRegistry, build_registry
from .executor import decode_arguments, dispatch_tool_calls, execute_tool
