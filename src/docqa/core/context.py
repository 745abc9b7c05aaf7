"""
Conversation state for a single request.
"""

from typing import Any

from pydantic import BaseModel, Field

from docqa.core.message import Message, Role


class Conversation(BaseModel):
    """
    Ordered messages exchanged while answering one question.
    """
    messages: list[Message] = Field(default_factory=list)

    def add_message(self, message: Message) -> None:
        """Add a message to the conversation."""
        self.messages.append(message)

    def add_system_message(self, content: str) -> None:
        """Add a system message."""
        self.add_message(Message.system(content))

    def add_user_message(self, content: str) -> None:
        """Add a user message."""
        self.add_message(Message.user(content))

    def add_assistant_message(self, content: str) -> None:
        """Add an assistant message."""
        self.add_message(Message.assistant(content))

    def get_messages(self) -> list[Message]:
        """Get all messages."""
        return self.messages.copy()

    def last_assistant_text(self) -> str:
        """Text of the most recent assistant message that has any."""
        for message in reversed(self.messages):
            if message.role == Role.ASSISTANT and message.text.strip():
                return message.text
        return ""

    def get_api_messages(self) -> list[dict[str, Any]]:
        """Get messages in API format."""
        return [msg.to_api_format() for msg in self.messages]
