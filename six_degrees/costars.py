"""
Co-star expansion

Turns one actor into the set of actors they share a movie with. Only the
actor's most popular dated movies are considered and only the top of each
cast list is taken, which bounds the number of cast lookups per expansion.
"""

import logging
from typing import Awaitable, Callable, Dict, List

from six_degrees import config
from six_degrees.cache import FilmographyCache
from six_degrees.models import CastMember, FilmographyEntry, PathMovie
from six_degrees.provider import ProviderUnavailable

logger = logging.getLogger(__name__)

CastFetcher = Callable[[int], Awaitable[List[CastMember]]]


class CoStarExpander:
    def __init__(
        self,
        cache: FilmographyCache,
        cast_fetcher: CastFetcher,
        movie_limit: int = config.MOVIE_FANOUT_CAP,
        cast_limit: int = config.CAST_PER_MOVIE_CAP
    ):
        self.cache = cache
        self.cast_fetcher = cast_fetcher
        self.movie_limit = movie_limit
        self.cast_limit = cast_limit

    def top_movies(self, filmography: List[FilmographyEntry]) -> List[FilmographyEntry]:
        """Dated movies by descending popularity, capped at movie_limit (ties keep provider order)"""
        dated = [movie for movie in filmography if movie.release_date]
        dated.sort(key=lambda movie: movie.popularity, reverse=True)
        return dated[:self.movie_limit]

    async def expand(self, actor_id: int) -> Dict[int, PathMovie]:
        """
        Find the co-stars of an actor

        Movies are processed one at a time in descending popularity, so the
        first (most popular) movie shared with a co-star is the one recorded.

        Args:
            actor_id: Actor to expand

        Returns:
            Mapping of co-star actor id -> connecting movie
        """
        try:
            filmography = await self.cache.get(actor_id)
        except ProviderUnavailable as e:
            logger.warning(f"Failed to get filmography for actor {actor_id}: {e}")
            return {}

        co_stars: Dict[int, PathMovie] = {}

        for movie in self.top_movies(filmography):
            try:
                cast = await self.cast_fetcher(movie.movie_id)
            except ProviderUnavailable as e:
                # Skip movies that fail to load
                logger.warning(f"Failed to get credits for movie {movie.movie_id}: {e}")
                continue

            connecting_movie = PathMovie(id=movie.movie_id, title=movie.title, year=movie.year)

            for member in cast[:self.cast_limit]:
                if member.actor_id != actor_id and member.actor_id not in co_stars:
                    co_stars[member.actor_id] = connecting_movie

        logger.debug(f"Actor {actor_id} expanded to {len(co_stars)} co-stars")
        return co_stars
