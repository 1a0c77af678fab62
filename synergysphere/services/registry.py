"""
In-process registry of live WebSocket connections.

One user may hold several connections (one per browser tab). The registry is
created by the application lifespan and handed to request handlers through
dependencies; nothing here is module-level state.
"""
import itertools

from starlette.websockets import WebSocketDisconnect, WebSocketState

_connection_ids = itertools.count(1)


class LiveConnection:
    """A registered socket plus the bookkeeping the liveness probe needs."""

    def __init__(self, websocket, user_id: int):
        self.websocket = websocket
        self.user_id = user_id
        self.connection_id = next(_connection_ids)
        self.is_alive = True
        self.closed = False

    async def send_text(self, text: str):
        await self.websocket.send_text(text)

    async def close(self, code: int = 1000, reason: str | None = None):
        if self.closed:
            return
        self.closed = True
        try:
            await self.websocket.close(code=code, reason=reason)
        except (RuntimeError, OSError, WebSocketDisconnect):
            # Already closed by the peer
            pass

    def __repr__(self):
        return f"<LiveConnection #{self.connection_id} user={self.user_id}>"


class ConnectionRegistry:
    def __init__(self):
        self._clients: dict[int, set[LiveConnection]] = {}

    def register(self, user_id: int, connection: LiveConnection) -> LiveConnection:
        self._clients.setdefault(user_id, set()).add(connection)
        return connection

    def unregister(self, connection: LiveConnection) -> bool:
        # Linear scan; registries are expected to stay small
        for user_id, connections in list(self._clients.items()):
            if connection in connections:
                connections.discard(connection)
                if not connections:
                    del self._clients[user_id]
                return True
        return False

    @staticmethod
    def is_open(connection: LiveConnection) -> bool:
        if connection.closed:
            return False
        ws = connection.websocket
        return (
            ws.application_state == WebSocketState.CONNECTED
            and ws.client_state == WebSocketState.CONNECTED
        )

    def connections_for(self, user_id: int) -> list[LiveConnection]:
        return list(self._clients.get(user_id, ()))

    def all_connections(self) -> list[LiveConnection]:
        return [c for connections in self._clients.values() for c in connections]

    def user_ids(self) -> list[int]:
        return list(self._clients)

    def connection_count(self) -> int:
        return sum(len(connections) for connections in self._clients.values())

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._clients

    async def close_all(self, code: int = 1001, reason: str = "Server shutting down"):
        for connection in self.all_connections():
            await connection.close(code=code, reason=reason)
        self._clients.clear()
