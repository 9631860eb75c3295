"""In-memory lobby registry: lobby code -> assistant configuration."""

import logging
import secrets
from typing import Dict, Optional

from lobbychat.constants import CODE_ALPHABET, CODE_LENGTH
from lobbychat.models import Lobby

logger = logging.getLogger(__name__)


class LobbyRegistry:
    """Volatile table of lobbies. Nothing here survives a restart."""

    def __init__(self, default_credential: Optional[str] = None) -> None:
        self._lobbies: Dict[str, Lobby] = {}
        self._default_credential = default_credential or None

    def __len__(self) -> int:
        return len(self._lobbies)

    def create_lobby(self, credential: Optional[str] = None) -> Lobby:
        lobby = Lobby(
            code=self._generate_code(),
            credential=credential or self._default_credential,
        )
        self._lobbies[lobby.code] = lobby
        logger.info(
            "Created lobby %s (assistant configured: %s)",
            lobby.code,
            lobby.assistant_configured,
        )
        return lobby

    def lobby_exists(self, code: str) -> bool:
        return code in self._lobbies

    def get_lobby(self, code: str) -> Optional[Lobby]:
        return self._lobbies.get(code)

    def get_credential(self, code: str) -> Optional[str]:
        lobby = self._lobbies.get(code)
        return lobby.credential if lobby else None

    def _generate_code(self) -> str:
        while True:
            code = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
            if code not in self._lobbies:
                return code
            logger.debug("Lobby code collision on %s, drawing again", code)
