"""Core state and messaging for the lobby chat relay."""

from lobbychat.assistant import AssistantResponder, CompletionProvider, OpenAICompletionProvider
from lobbychat.constants import Role
from lobbychat.membership import MembershipTracker
from lobbychat.models import Lobby, Member, Message
from lobbychat.registry import LobbyRegistry
from lobbychat.store import MessageStore

__all__ = [
    "AssistantResponder",
    "CompletionProvider",
    "OpenAICompletionProvider",
    "Role",
    "MembershipTracker",
    "Lobby",
    "Member",
    "Message",
    "LobbyRegistry",
    "MessageStore",
]
