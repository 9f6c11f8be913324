# conversation/__init__.py

from .messages import Role, ChatMessage, ConversationLog
from .accumulator import ResponseAccumulator
from .turn import TurnController, TurnContext, TurnState

__all__ = [
    'Role', 'ChatMessage', 'ConversationLog', 'ResponseAccumulator',
    'TurnController', 'TurnContext', 'TurnState',
]
