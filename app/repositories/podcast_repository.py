"""
Podcast episode queries.
"""

from app.db.helpers import fetch_all, fetch_one, with_db_retry
from app.models.domain.event_domain import PodcastEpisode

EPISODE_COLUMNS = """
    id, episode_number, title, guest, business, duration, release_date,
    spotify_url, image, description
"""


class PodcastRepository:
    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def list_episodes(cls) -> list[PodcastEpisode]:
        rows = await fetch_all(
            f"SELECT {EPISODE_COLUMNS} FROM podcast_episodes ORDER BY episode_number DESC"
        )
        return [PodcastEpisode(**{**row, "id": str(row["id"])}) for row in rows]

    @classmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def get_episode(cls, episode_id: str) -> PodcastEpisode | None:
        row = await fetch_one(
            f"SELECT {EPISODE_COLUMNS} FROM podcast_episodes WHERE id = %s", (episode_id,)
        )
        return PodcastEpisode(**{**row, "id": str(row["id"])}) if row else None
