import json

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from synergysphere.config import settings
from synergysphere.services.registry import ConnectionRegistry

PING_TEXT = json.dumps({"type": "ping"})


async def sweep_connections(registry: ConnectionRegistry) -> dict:
    """
    One liveness round. Connections that did not answer the previous ping are
    terminated; every other connection is marked pending and pinged again.
    """
    terminated = 0
    pinged = 0
    for connection in registry.all_connections():
        if not connection.is_alive or not registry.is_open(connection):
            registry.unregister(connection)
            await connection.close(code=1001, reason="Connection unresponsive")
            terminated += 1
            continue

        connection.is_alive = False
        try:
            await connection.send_text(PING_TEXT)
            pinged += 1
        except Exception as e:
            print(f"[HEARTBEAT] Ping to {connection!r} failed: {e}")
            registry.unregister(connection)
            terminated += 1

    if terminated:
        print(f"[HEARTBEAT] Terminated {terminated} unresponsive connection(s)")
    return {"pinged": pinged, "terminated": terminated}


def setup_heartbeat(registry: ConnectionRegistry):
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        sweep_connections,
        trigger=IntervalTrigger(seconds=settings.WS_PING_INTERVAL_SECONDS),
        args=[registry],
        id="websocket_heartbeat",
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    return scheduler
