"""
Filmography caching for a single connection search

An actor can be reached from several BFS branches (and from both sides of
the search), so the filmography of each actor is fetched at most once per
session and memoized here. The cache belongs to exactly one search: it is
not shared between concurrent searches and is reset when the search ends.
"""

import logging
from typing import Awaitable, Callable, Dict, List

from six_degrees.models import FilmographyEntry

logger = logging.getLogger(__name__)

FilmographyFetcher = Callable[[int], Awaitable[List[FilmographyEntry]]]


class FilmographyCache:
    """
    Session-scoped memo of actor id -> filmography

    Failed fetches are not memoized; the provider error propagates to the
    caller and a later access tries again.
    """

    def __init__(self, fetcher: FilmographyFetcher):
        """
        Args:
            fetcher: Async provider lookup used on the first access per actor
        """
        self._fetcher = fetcher
        self._cache: Dict[int, List[FilmographyEntry]] = {}
        self._hits = 0
        self._misses = 0

    async def get(self, actor_id: int) -> List[FilmographyEntry]:
        """
        Get an actor's filmography, fetching it only on first access

        Args:
            actor_id: Actor whose filmography is needed

        Returns:
            The memoized filmography
        """
        if actor_id in self._cache:
            self._hits += 1
            logger.debug(f"Filmography cache HIT: {actor_id}")
            return self._cache[actor_id]

        self._misses += 1
        logger.debug(f"Filmography cache MISS: {actor_id}")
        filmography = await self._fetcher(actor_id)
        self._cache[actor_id] = filmography
        return filmography

    def reset(self):
        """Discard every memoized filmography"""
        if self._cache:
            logger.debug(f"Filmography cache reset ({len(self._cache)} entries)")
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def __contains__(self, actor_id: int) -> bool:
        return actor_id in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def get_stats(self) -> dict:
        """
        Get cache statistics

        Returns:
            Dictionary with cache metrics
        """
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0

        return {
            'size': len(self._cache),
            'hits': self._hits,
            'misses': self._misses,
            'hit_rate': round(hit_rate, 2),
            'total_requests': total_requests
        }
