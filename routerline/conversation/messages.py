# conversation/messages.py

from enum import Enum
from dataclasses import dataclass
from typing import Iterator, List, Optional


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class ChatMessage:
    """
    Represents a single message in the conversation.
    """
    role: Role
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content}


class ConversationLog:
    """
    Append-only record of the conversation.

    The log is never reordered or edited in place; its payload is exactly what
    is sent to the API on the next turn.
    """
    def __init__(self, system_prompt: Optional[str] = None):
        self._messages: List[ChatMessage] = []
        if system_prompt:
            self.append(Role.SYSTEM, system_prompt)

    def append(self, role: Role, content: str) -> ChatMessage:
        """Append a new message to the log and return it."""
        message = ChatMessage(Role(role), content)
        self._messages.append(message)
        return message

    @property
    def messages(self) -> tuple:
        return tuple(self._messages)

    def to_payload(self) -> List[dict]:
        """Get the log as a list of role/content dictionaries."""
        return [m.to_dict() for m in self._messages]

    def last(self, role: Optional[Role] = None) -> Optional[ChatMessage]:
        """Return the most recent message, optionally of a given role."""
        for message in reversed(self._messages):
            if role is None or message.role == role:
                return message
        return None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(tuple(self._messages))
