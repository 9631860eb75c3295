"""Shared enums and constants for the lobby chat core."""

from enum import Enum


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6

MIN_CODE_LENGTH = 4
MAX_CODE_LENGTH = 10
MAX_NICKNAME_LENGTH = 32
MAX_CREDENTIAL_LENGTH = 200
MAX_CONTENT_LENGTH = 400

ASSISTANT_SENDER = "DM"
ASSISTANT_SYSTEM_PROMPT = (
    "You are a helpful DM for a multiplayer lobby. Provide short, encouraging replies."
)

NOT_CONFIGURED_REPLY = "No automated reply is configured for this lobby"
EMPTY_REPLY = "Ready to keep chatting!"
UNAVAILABLE_REPLY = "The DM is unavailable right now"
