from fastapi import APIRouter, Depends

from lounge.api.deps import get_hub, get_message_log
from lounge.core.errors import PersistenceFailure
from lounge.services.message_log import MessageLog
from lounge.websocket.hub import ChatHub

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    log: MessageLog = Depends(get_message_log),
    hub: ChatHub = Depends(get_hub),
) -> dict:
    try:
        total = log.count()
        return {"status": "healthy", "database": "connected", "messages": total, "activeUsers": len(hub.registry)}
    except PersistenceFailure as exc:
        return {"status": "unhealthy", "database": "disconnected", "error": str(exc)}
