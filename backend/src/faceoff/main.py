"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from faceoff.config import settings
from faceoff.api.routes.roster import router as roster_router
from faceoff.api.routes.session import router as session_router
from faceoff.api.websockets.session_ws import session_websocket
from faceoff.repositories.session_repository import SessionRepository
from faceoff.services.change_broadcaster import ChangeBroadcaster
from faceoff.services.signup_registry import SignupRegistry

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def get_database_path() -> str:
    """Get the database path from settings, resolving relative paths from the repo root."""
    if settings.database_path == ":memory:":
        return settings.database_path
    db_path = Path(settings.database_path)
    if db_path.is_absolute():
        return str(db_path)
    repo_root = Path(__file__).parent.parent.parent.parent
    return str(repo_root / db_path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Tests may pre-populate app.state
    repository = None
    if not hasattr(app.state, "registry"):
        repository = SessionRepository(get_database_path())
        app.state.broadcaster = ChangeBroadcaster()
        app.state.registry = SignupRegistry(
            repository=repository,
            broadcaster=app.state.broadcaster,
            capacity=settings.max_participants,
            split_delay_seconds=settings.split_delay_seconds,
        )
    logger.info("Faceoff started")
    yield
    # Only close what this lifespan opened
    if repository is not None:
        repository.close()


app = FastAPI(
    title="Faceoff",
    description="Pickup hockey signups with live team splits",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "faceoff"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Faceoff API",
        "version": "0.1.0",
        "docs": "/docs",
        "websocket_url": "/ws",
    }


# Register routers
app.include_router(roster_router)
app.include_router(session_router)


@app.websocket("/ws")
async def websocket_session(websocket: WebSocket):
    """WebSocket endpoint for session change events."""
    await session_websocket(websocket, app.state.broadcaster)
