"""
Podcast feed service.
"""

from app.models.domain.event_domain import PodcastEpisode
from app.repositories.podcast_repository import PodcastRepository


async def list_episodes() -> list[PodcastEpisode]:
    """Episodes, latest episode number first."""
    return await PodcastRepository.list_episodes()


async def get_episode(episode_id: str) -> PodcastEpisode | None:
    return await PodcastRepository.get_episode(episode_id)
