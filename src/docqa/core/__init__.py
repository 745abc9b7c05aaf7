"""
Core module - agent loop, messages and tools.
"""

from docqa.core.agent import AgentAnswer, AgentConfig, AgentState, AnswerAgent
from docqa.core.context import Conversation
from docqa.core.executor import ToolExecutor
from docqa.core.message import ContentBlock, Message, Role, ToolUseContent
from docqa.core.tools import Tool, ToolResult

__all__ = [
    "AgentAnswer",
    "AgentConfig",
    "AgentState",
    "AnswerAgent",
    "Conversation",
    "ToolExecutor",
    "ContentBlock",
    "Message",
    "Role",
    "ToolUseContent",
    "Tool",
    "ToolResult",
]
