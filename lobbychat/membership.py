"""In-memory membership tracking: lobby -> {connection -> nickname}."""

from typing import Dict, List, Optional

from lobbychat.errors import NotFoundError
from lobbychat.models import Member
from lobbychat.registry import LobbyRegistry


class MembershipTracker:
    def __init__(self, registry: LobbyRegistry) -> None:
        self._registry = registry
        self._lobby_members: Dict[str, Dict[str, Member]] = {}
        self._connection_lobby: Dict[str, str] = {}

    def open_lobby(self, code: str) -> None:
        self._lobby_members.setdefault(code, {})

    def record_join(self, code: str, connection_id: str, nickname: str) -> Optional[str]:
        """Add ``connection_id`` to ``code``.

        Re-joining the same lobby overwrites the nickname. Joining a different
        lobby moves the connection; the lobby it left is returned so its roster
        can be refreshed.
        """
        if not self._registry.lobby_exists(code):
            raise NotFoundError()
        previous = self._connection_lobby.get(connection_id)
        if previous == code:
            previous = None
        elif previous is not None:
            self._remove_member(previous, connection_id)
        members = self._lobby_members.setdefault(code, {})
        members[connection_id] = Member(connection_id=connection_id, nickname=nickname)
        self._connection_lobby[connection_id] = code
        return previous

    def record_leave(self, connection_id: str) -> Optional[str]:
        code = self._connection_lobby.pop(connection_id, None)
        if code is None:
            return None
        self._remove_member(code, connection_id)
        return code

    def lobby_of(self, connection_id: str) -> Optional[str]:
        return self._connection_lobby.get(connection_id)

    def roster_of(self, code: str) -> List[str]:
        return [member.nickname for member in self._lobby_members.get(code, {}).values()]

    def connections_of(self, code: str) -> List[str]:
        return list(self._lobby_members.get(code, {}))

    def _remove_member(self, code: str, connection_id: str) -> None:
        members = self._lobby_members.get(code)
        if members is not None:
            members.pop(connection_id, None)
