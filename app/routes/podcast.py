"""
podcast.py
----------
Purpose:
    Read-only podcast feed.
"""

from fastapi import APIRouter, HTTPException, status

from app.db.helpers import DatabaseError
from app.infrastructure.observability.logging import get_logger
from app.models.domain.event_domain import PodcastEpisode
from app.services import podcast_service

router = APIRouter(prefix="/api/podcast-episodes", tags=["podcast"])
logger = get_logger(__name__)


@router.get("", response_model=list[PodcastEpisode])
async def list_episodes():
    try:
        return await podcast_service.list_episodes()
    except DatabaseError as e:
        logger.error("Database error listing podcast episodes", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily unavailable, please try again",
        ) from e


@router.get("/{episode_id}", response_model=PodcastEpisode)
async def get_episode(episode_id: str):
    try:
        episode = await podcast_service.get_episode(episode_id)
    except DatabaseError as e:
        logger.error("Database error fetching podcast episode", episode_id=episode_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily unavailable, please try again",
        ) from e

    if not episode:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Episode not found")
    return episode
