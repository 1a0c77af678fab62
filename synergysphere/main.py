import traceback
from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from synergysphere.config import settings
from synergysphere.database import AsyncSessionLocal, create_tables
from synergysphere.routers.auth import router as auth_router
from synergysphere.routers.users import router as users_router
from synergysphere.routers.projects import router as projects_router
from synergysphere.routers.tasks import router as tasks_router
from synergysphere.routers.events import router as events_router
from synergysphere.routers.notifications import router as notifications_router
from synergysphere.routers.realtime import router as realtime_router

from synergysphere.services.heartbeat import setup_heartbeat
from synergysphere.services.membership import MembershipResolver
from synergysphere.services.notifier import Notifier
from synergysphere.services.registry import ConnectionRegistry


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        await create_tables()

    # Each worker process owns its own registry; live pushes only reach
    # sockets connected to this process.
    registry = ConnectionRegistry()
    app.state.registry = registry
    app.state.notifier = Notifier(registry, MembershipResolver(AsyncSessionLocal))

    scheduler = setup_heartbeat(registry)
    print(f"[HEARTBEAT] Liveness probe every {settings.WS_PING_INTERVAL_SECONDS}s")

    yield

    # Clean up
    scheduler.shutdown(wait=False)
    await registry.close_all()
    print("[WS] All live connections closed.")


app = FastAPI(
    lifespan=lifespan,
    title="SynergySphere API",
    description="Projects, tasks, calendar events and real-time notifications",
    version="1.0.0",
)

# Enable CORS for the frontend
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex="https?://.*",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

#Global exception handler to ensure CORS headers on failure
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    error_msg = traceback.format_exc()
    print(f"CRITICAL ERROR: {error_msg}")

    # Write to log
    with open("error.log", "a") as f:
        f.write(f"\n[{datetime.now()}] 500 Error:\n{error_msg}\n")

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error"},
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Credentials": "true"
        }
    )

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(projects_router)
app.include_router(tasks_router)
app.include_router(events_router)
app.include_router(notifications_router)
app.include_router(realtime_router)

@app.get("/")
def root():
    return {"message": "SynergySphere API running"}

@app.get("/health")
def health(request: Request):
    registry = getattr(request.app.state, "registry", None)
    return {
        "status": "ok",
        "timestamp": datetime.now().isoformat(),
        "connected_users": len(registry.user_ids()) if registry else 0,
        "connections": registry.connection_count() if registry else 0,
    }
