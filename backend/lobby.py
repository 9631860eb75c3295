"""
Session coordinator: lobby lifecycle, live connections and message fan-out.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Set, Type, TypeVar
from uuid import uuid4

from fastapi import WebSocket
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from backend.api.v1.schemas import CreateLobbyRequest, JoinLobbyRequest, SendMessagePayload
from lobbychat.assistant import AssistantResponder, CompletionProvider
from lobbychat.constants import Role
from lobbychat.errors import NotFoundError, StorageError, ValidationError
from lobbychat.membership import MembershipTracker
from lobbychat.models import Message, now_ms
from lobbychat.registry import LobbyRegistry
from lobbychat.store import MessageStore

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)
Ack = Dict[str, str]


class SessionCoordinator:
    """Owns every piece of volatile lobby state for one server instance.

    Mutations of the registry, the membership tracker and the connection map
    happen under ``self._lock``; network sends happen outside it so a slow
    socket never stalls unrelated lobbies.
    """

    def __init__(
        self,
        store: MessageStore,
        provider: CompletionProvider,
        default_credential: Optional[str] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.registry = LobbyRegistry(default_credential)
        self.membership = MembershipTracker(self.registry)
        self.assistant = AssistantResponder(self.registry, store, provider, clock)
        self._clock = clock
        self._connections: Dict[str, WebSocket] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._lock = asyncio.Lock()

    @property
    def pending_replies(self) -> int:
        return len(self._tasks)

    # Request/response surface

    async def create_lobby(self, payload: Any) -> Dict[str, str]:
        request = _parse(CreateLobbyRequest, payload)
        async with self._lock:
            lobby = self.registry.create_lobby(request.credential)
            self.membership.open_lobby(lobby.code)
        return {"code": lobby.code}

    async def check_join(self, payload: Any) -> Dict[str, bool]:
        request = _parse(JoinLobbyRequest, payload)
        if not self.registry.lobby_exists(request.code):
            raise NotFoundError()
        return {"ok": True}

    async def fetch_history(self, code: str) -> Dict[str, List[Dict[str, object]]]:
        if not self.registry.lobby_exists(code):
            raise NotFoundError()
        messages = await self.store.list_by_lobby(code)
        return {"messages": [message.to_dict() for message in messages]}

    # Live-connection surface

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        connection_id = uuid4().hex
        async with self._lock:
            self._connections[connection_id] = websocket
        logger.debug("Connection %s opened", connection_id)
        return connection_id

    async def join(self, connection_id: str, payload: Any) -> Ack:
        try:
            request = _parse(JoinLobbyRequest, payload)
            async with self._lock:
                previous = self.membership.record_join(request.code, connection_id, request.nickname)
        except (ValidationError, NotFoundError) as exc:
            return {"error": str(exc)}
        logger.info("Connection %s joined lobby %s as %r", connection_id, request.code, request.nickname)
        if previous:
            await self._broadcast_users(previous)
        await self._broadcast_users(request.code)
        return {}

    async def send(self, connection_id: str, payload: Any) -> Ack:
        try:
            request = _parse(SendMessagePayload, payload)
            if not self.registry.lobby_exists(request.code):
                raise NotFoundError()
        except (ValidationError, NotFoundError) as exc:
            return {"error": str(exc)}

        created_at = self._clock()
        try:
            await self.store.append(request.code, request.nickname, Role.USER, request.content, created_at)
        except StorageError:
            logger.exception("Could not persist message from %s in lobby %s", connection_id, request.code)
        message = Message(
            id=created_at,
            lobby_code=request.code,
            sender=request.nickname,
            role=Role.USER,
            content=request.content,
            created_at=created_at,
        )
        await self._broadcast(request.code, {"type": "message", "payload": message.to_dict()})
        self._spawn_reply(request.code, request.content)
        return {}

    async def disconnect(self, connection_id: str) -> None:
        async with self._lock:
            self._connections.pop(connection_id, None)
            code = self.membership.record_leave(connection_id)
        logger.debug("Connection %s closed", connection_id)
        if code:
            await self._broadcast_users(code)

    async def drain(self) -> None:
        """Wait for every in-flight assistant reply to be delivered."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # Assistant replies

    def _spawn_reply(self, code: str, content: str) -> None:
        task = asyncio.create_task(self._deliver_reply(code, content))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver_reply(self, code: str, content: str) -> None:
        try:
            reply = await self.assistant.respond(code, content)
            await self._broadcast(code, {"type": "message", "payload": reply.to_dict()})
        except Exception:
            logger.exception("Assistant reply task for lobby %s failed", code)

    # Fan-out

    async def _broadcast_users(self, code: str) -> None:
        async with self._lock:
            roster = self.membership.roster_of(code)
        await self._broadcast(code, {"type": "users", "payload": roster})

    async def _broadcast(self, code: str, payload: Dict[str, object]) -> None:
        async with self._lock:
            targets = [
                (connection_id, self._connections.get(connection_id))
                for connection_id in self.membership.connections_of(code)
            ]
        stale: List[str] = []
        for connection_id, websocket in targets:
            if not websocket:
                continue
            try:
                await websocket.send_json(payload)
            except Exception:
                logger.debug("Dropping stale connection %s", connection_id, exc_info=True)
                stale.append(connection_id)
        for connection_id in stale:
            await self.disconnect(connection_id)


def _parse(schema: Type[SchemaT], payload: Any) -> SchemaT:
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(details=exc.errors(include_url=False, include_input=False)) from exc
