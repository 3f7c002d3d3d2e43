import logging

from fastapi import APIRouter, HTTPException, status

from lounge.config import settings
from lounge.schemas.game import Game
from lounge.services.games import ensure_catalog, load_games

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/games", tags=["games"])


@router.get("", response_model=list[Game])
async def list_games() -> list[Game]:
    try:
        ensure_catalog(settings.GAMES_FILE)
        return load_games(settings.GAMES_FILE)
    except (OSError, ValueError) as exc:
        logger.error("Failed to load games from %s: %s", settings.GAMES_FILE, exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load games") from None
