"""
lounge: FastAPI entry point.

One WebSocket per client at ``/ws`` carries registration, messages, typing
and presence events; ``/api`` serves message history, image uploads and the
game catalog.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from lounge.api import games, health, messages, uploads
from lounge.api.deps import get_ws_hub
from lounge.config import settings
from lounge.core.errors import ChatError
from lounge.database import SessionLocal, init_db
from lounge.services.message_log import MessageLog
from lounge.services.presence import PresenceRegistry
from lounge.websocket.handlers import chat_ws_handler
from lounge.websocket.hub import ChatHub

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

os.makedirs(settings.UPLOAD_DIR, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    log = MessageLog(SessionLocal)
    app.state.message_log = log
    # Presence lives only as long as the process: every start is an empty room
    app.state.hub = ChatHub(
        PresenceRegistry(),
        log,
        upload_dir=settings.UPLOAD_DIR,
        upload_url_prefix=settings.UPLOAD_URL_PREFIX,
    )
    logger.info("Chat hub ready (%d messages in log)", log.count())
    yield


app = FastAPI(
    title="lounge",
    description="Real-time chat with image attachments and live presence",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
# allow_origins=["*"] is incompatible with allow_credentials=True. When the
# wildcard is present, switch to allow_origin_regex=".*" instead.
_cors_origins = [o for o in settings.CORS_ORIGINS if o != "*"]
_cors_regex = ".*" if len(_cors_origins) < len(settings.CORS_ORIGINS) else None

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_origin_regex=_cors_regex,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(health.router)
app.include_router(messages.router, prefix="/api")
app.include_router(uploads.router, prefix="/api")
app.include_router(games.router, prefix="/api")

# Serve stored attachments as static assets
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# ---------------------------------------------------------------------------
# WebSocket endpoint
# ---------------------------------------------------------------------------


@app.websocket("/ws")
async def chat_websocket_endpoint(websocket: WebSocket, hub: ChatHub = Depends(get_ws_hub)) -> None:
    await chat_ws_handler(websocket, hub, max_queue=settings.SEND_QUEUE_SIZE)


# ---------------------------------------------------------------------------
# Custom exception handlers
# ---------------------------------------------------------------------------


@app.exception_handler(ChatError)
async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
