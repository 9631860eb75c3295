"""Domain models for lobbies, members and chat messages."""

import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from lobbychat.constants import Role


@dataclass
class Lobby:
    code: str
    credential: Optional[str] = field(default=None, repr=False)

    @property
    def assistant_configured(self) -> bool:
        return bool(self.credential)


@dataclass
class Member:
    connection_id: str
    nickname: str


@dataclass(frozen=True)
class Message:
    id: int
    lobby_code: str
    sender: str
    role: Role
    content: str
    created_at: int

    def to_dict(self) -> Dict[str, Union[int, str]]:
        return {
            "id": self.id,
            "lobbyCode": self.lobby_code,
            "sender": self.sender,
            "role": self.role.value,
            "content": self.content,
            "createdAt": self.created_at,
        }


def now_ms() -> int:
    return time.time_ns() // 1_000_000
