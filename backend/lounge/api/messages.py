from fastapi import APIRouter, Depends, Query

from lounge.api.deps import get_message_log
from lounge.config import settings
from lounge.schemas.message import MessagePage
from lounge.services.message_log import MessageLog

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("", response_model=MessagePage)
async def list_messages(
    limit: int = Query(default=settings.MESSAGE_PAGE_SIZE, ge=1, le=settings.MESSAGE_PAGE_MAX),
    offset: int = Query(default=0, ge=0),
    log: MessageLog = Depends(get_message_log),
) -> MessagePage:
    """History, newest first. ``offset`` counts back from the most recent message."""
    return log.read_page(offset=offset, limit=limit)
