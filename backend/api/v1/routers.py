"""
API Router for lobbies, message history and the live lobby connection.
"""

import json
from typing import Any, Dict

from fastapi import APIRouter, Body, Request, WebSocket, WebSocketDisconnect

from backend.api.v1.schemas import CreateLobbyResponse, JoinLobbyResponse, MessageHistory
from backend.lobby import SessionCoordinator

api_router = APIRouter()


def _coordinator(connection: Request | WebSocket) -> SessionCoordinator:
    return connection.app.state.coordinator


@api_router.get("/health", tags=["Root"])
async def health():
    return {"status": "ok"}


@api_router.post("/lobby", response_model=CreateLobbyResponse, tags=["Lobby"])
async def create_lobby(request: Request, payload: Any = Body(default=None)):
    return await _coordinator(request).create_lobby(payload)


@api_router.post("/lobby/join", response_model=JoinLobbyResponse, tags=["Lobby"])
async def join_lobby(request: Request, payload: Any = Body(default=None)):
    return await _coordinator(request).check_join(payload)


@api_router.get("/lobby/{code}/messages", response_model=MessageHistory, tags=["Lobby"])
async def get_messages(request: Request, code: str):
    return await _coordinator(request).fetch_history(code)


@api_router.websocket("/lobby/ws")
async def lobby_ws(websocket: WebSocket):
    coordinator = _coordinator(websocket)
    connection_id = await coordinator.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if not isinstance(frame, dict):
                continue
            message_type = frame.get("type")
            payload = frame.get("payload")
            if message_type == "joinLobby":
                ack = await coordinator.join(connection_id, payload)
                await websocket.send_json(_ack_frame(frame, ack))
            elif message_type == "message":
                ack = await coordinator.send(connection_id, payload)
                await websocket.send_json(_ack_frame(frame, ack))
            elif message_type == "ping":
                await websocket.send_json({"type": "pong"})
            else:
                await websocket.send_json({"type": "error", "message": "Unknown event type."})
    except WebSocketDisconnect:
        pass
    finally:
        await coordinator.disconnect(connection_id)


def _ack_frame(frame: Dict[str, Any], ack: Dict[str, str]) -> Dict[str, Any]:
    return {"type": "ack", "ack": frame.get("ack"), "data": ack}
