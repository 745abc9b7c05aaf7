"""
AnswerAgent - bounded tool-calling loop that produces cited answers.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, Field

from docqa.core.context import Conversation
from docqa.core.executor import ToolExecutor
from docqa.core.tools import Tool

if TYPE_CHECKING:
    from docqa.core.message import ToolUseContent
    from docqa.providers.base import LLMProvider

logger = logging.getLogger(__name__)


DEFAULT_SYSTEM_POLICY = """You are an assistant that answers questions about business and financial documents using a searchable knowledge base. Follow these rules strictly:

1. Search the knowledge base before answering any factual question.
2. Cite every factual claim inline as a markdown link of the form [source](file), using the citation returned by the search tool.
3. When several sources support a claim, cite all of them.
4. When more than one retrieved source is relevant, cross-check claims against each other before stating them.
5. If the knowledge base has no relevant information, say explicitly that the information was not found. Never invent facts or citations.
6. Keep answers clear, concise and well structured."""

TURN_LIMIT_FALLBACK = (
    "I could not finish answering within the allowed number of steps, "
    "so no complete answer is available."
)


class AgentState(str, Enum):
    """Position of the agent in its tool-calling loop."""
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOL = "executing_tool"
    DONE = "done"


class AgentConfig(BaseModel):
    """Configuration for an agent."""
    max_turns: int = Field(default=5, gt=0)
    system_prompt: str = DEFAULT_SYSTEM_POLICY
    model: str = "gpt-4o"
    temperature: float = 0.0
    max_tokens: int = 1024


class AgentAnswer(BaseModel):
    """Outcome of answering one question."""
    text: str
    turns: int
    tool_calls: int = 0
    state: AgentState = AgentState.DONE
    turn_limit_reached: bool = False


class AnswerAgent:
    """
    Answers questions by letting the model call tools until it replies
    without requesting any, for at most ``max_turns`` model turns.

    Each call to ``answer`` starts a fresh conversation, so one agent can
    serve concurrent requests.
    """

    def __init__(
        self,
        provider: "LLMProvider",
        tools: list[Tool],
        config: AgentConfig | None = None,
        on_tool_call: Callable[["ToolUseContent"], None] | None = None,
    ):
        self.provider = provider
        self.config = config or AgentConfig()
        self.executor = ToolExecutor(tools)
        self.on_tool_call = on_tool_call

    async def answer(self, question: str) -> AgentAnswer:
        """
        Answer a question.

        Args:
            question: User question

        Returns:
            AgentAnswer with the final text. When the turn limit is hit the
            text is the latest non-empty assistant text, or a fixed notice.

        Raises:
            ModelFailure: If a model call fails
        """
        conversation = Conversation()
        conversation.add_system_message(self.config.system_prompt)
        conversation.add_user_message(question)

        state = AgentState.AWAITING_MODEL
        tool_call_count = 0

        for turn in range(1, self.config.max_turns + 1):
            response = await self.provider.complete(
                messages=conversation.get_api_messages(),
                tools=self.executor.get_tools_api_format(),
                model=self.config.model,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )

            if response.message:
                conversation.add_message(response.message)

            # No tool calls means the model has answered
            if not response.tool_calls:
                state = AgentState.DONE
                logger.info(f"Answered in {turn} turn(s) with {tool_call_count} tool call(s)")
                return AgentAnswer(
                    text=response.text,
                    turns=turn,
                    tool_calls=tool_call_count,
                    state=state,
                )

            state = AgentState.EXECUTING_TOOL
            for call in response.tool_calls:
                logger.info(f"Turn {turn}: calling tool '{call.name}' with {call.input}")
                if self.on_tool_call:
                    self.on_tool_call(call)

            results = await self.executor.execute_tool_uses(response.tool_calls)
            for message in results:
                conversation.add_message(message)
            tool_call_count += len(results)

            state = AgentState.AWAITING_MODEL

        logger.warning(
            f"Turn limit of {self.config.max_turns} reached without a final answer; "
            "returning partial text"
        )
        return AgentAnswer(
            text=conversation.last_assistant_text() or TURN_LIMIT_FALLBACK,
            turns=self.config.max_turns,
            tool_calls=tool_call_count,
            state=state,
            turn_limit_reached=True,
        )

    async def run(self, question: str) -> str:
        """Answer a question and return only the text."""
        result = await self.answer(question)
        return result.text
