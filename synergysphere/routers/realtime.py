"""
The real-time channel.

A client connects to ``/ws`` with its bearer token either in the ``token``
query parameter or the ``Authorization`` header. Without one, the first frame
must be ``{"type": "authenticate", "token": "..."}``. Anything else closes the
socket with the policy-violation code.
"""
import asyncio
import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from synergysphere.config import settings
from synergysphere.services.registry import ConnectionRegistry, LiveConnection
from synergysphere.utils.security import user_id_from_token

router = APIRouter(tags=["realtime"])


def _token_from_request(websocket: WebSocket) -> str | None:
    token = websocket.query_params.get("token")
    if token:
        return token
    authorization = websocket.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return None


async def _receive_text(websocket: WebSocket) -> str:
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(code=message.get("code", 1000))
    if message.get("text") is not None:
        return message["text"]
    return (message.get("bytes") or b"").decode("utf-8", errors="replace")


def _parse(raw: str) -> dict | None:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        print(f"[WS] Ignoring malformed message: {e}")
        return None
    if not isinstance(data, dict):
        print(f"[WS] Ignoring non-object message: {raw[:50]}")
        return None
    return data


async def _authenticate(websocket: WebSocket) -> int | None:
    token = _token_from_request(websocket)
    if token:
        return user_id_from_token(token)

    # No credential at connect time: expect an explicit handshake
    try:
        raw = await asyncio.wait_for(_receive_text(websocket), timeout=settings.WS_AUTH_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        return None
    data = _parse(raw)
    if not data or data.get("type") != "authenticate" or not data.get("token"):
        return None
    return user_id_from_token(str(data["token"]))


async def handle_client_message(connection: LiveConnection, raw: str):
    # Any frame from the peer proves it is still there
    connection.is_alive = True
    data = _parse(raw)
    if data is None:
        return
    kind = data.get("type")
    if kind == "ping":
        await connection.send_text(json.dumps({"type": "pong"}))
    elif kind == "authenticate":
        await connection.send_text(json.dumps({"type": "authenticated", "userId": connection.user_id}))


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket):
    registry: ConnectionRegistry = websocket.app.state.registry
    await websocket.accept()

    try:
        user_id = await _authenticate(websocket)
    except WebSocketDisconnect:
        return
    if user_id is None:
        print("[WS] Authentication failed - closing connection")
        await websocket.close(code=settings.WS_POLICY_CLOSE_CODE, reason="Invalid token")
        return

    connection = registry.register(user_id, LiveConnection(websocket, user_id))
    print(f"[WS] User {user_id} connected ({connection!r})")

    try:
        await connection.send_text(json.dumps({"type": "authenticated", "userId": user_id}))
        while True:
            raw = await _receive_text(websocket)
            await handle_client_message(connection, raw)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        print(f"[WS] Connection error for user {user_id}: {e}")
    finally:
        registry.unregister(connection)
        connection.closed = True
        print(f"[WS] User {user_id} disconnected ({connection!r})")
