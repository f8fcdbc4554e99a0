"""
Bidirectional BFS over the co-star graph

The graph is never stored: an actor's neighbours are discovered by the
CoStarExpander, which costs one filmography lookup plus up to
MOVIE_FANOUT_CAP cast lookups. Growing both ends in lockstep keeps the
number of expanded actors close to the minimum.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from six_degrees import config, database
from six_degrees.cache import FilmographyCache
from six_degrees.costars import CoStarExpander
from six_degrees.enrichment import DeceasedLookup, EnrichmentStage
from six_degrees.frontier import Frontier
from six_degrees.models import ConnectionResult, PathMovie
from six_degrees.paths import reconstruct_path
from six_degrees.provider import MetadataProvider

logger = logging.getLogger(__name__)


class SearchTimeout(Exception):
    """Raised when a connection search exceeds its wall-clock budget"""


@dataclass
class Meeting:
    """Actor reached from both sides, ending the search."""

    actor_id: int
    side_a: Frontier
    side_b: Frontier

    @property
    def movie_from_a(self) -> Optional[PathMovie]:
        return self.side_a.node(self.actor_id).movie

    @property
    def movie_from_b(self) -> Optional[PathMovie]:
        return self.side_b.node(self.actor_id).movie


class SideSelector:
    """
    Decides which frontier grows next

    The side with fewer expanded levels goes next and A wins ties. When the
    chosen side has nothing queued, the other side is expanded instead.
    """

    def choose(self, side_a: Frontier, side_b: Frontier) -> Optional[Frontier]:
        if side_a.queue and (side_a.depth <= side_b.depth or not side_b.queue):
            return side_a
        if side_b.queue:
            return side_b
        return None


class BidirectionalSearchEngine:
    def __init__(self, expander: CoStarExpander, selector: Optional[SideSelector] = None):
        self.expander = expander
        self.selector = selector or SideSelector()
        self.actors_expanded = 0

    async def search(self, actor_a_id: int, actor_b_id: int,
                     max_degrees: int = config.DEFAULT_MAX_DEGREES) -> Optional[Meeting]:
        """
        Find the actor where the two frontiers meet

        One level is expanded per round and the bound is checked before each
        round, so a returned meeting never implies more than max_degrees hops.

        Args:
            actor_a_id: Starting actor
            actor_b_id: Target actor
            max_degrees: Maximum degrees of separation to explore

        Returns:
            The meeting, or None when no connection exists within the bound
        """
        side_a = Frontier(actor_a_id, 'A')
        side_b = Frontier(actor_b_id, 'B')

        # Same actor = 0 degrees
        if actor_a_id == actor_b_id:
            return Meeting(actor_a_id, side_a, side_b)

        while side_a.depth + side_b.depth < max_degrees:
            side = self.selector.choose(side_a, side_b)
            if side is None:
                break
            opposite = side_b if side is side_a else side_a

            meeting_actor_id = await self._expand_level(side, opposite)

            logger.debug(
                f"Expanded level {side.depth} from side {side.name}",
                extra={
                    "depth_a": side_a.depth,
                    "depth_b": side_b.depth,
                    "visited_a": len(side_a),
                    "visited_b": len(side_b)
                }
            )

            if meeting_actor_id is not None:
                logger.info(
                    f"Frontiers met at actor {meeting_actor_id} "
                    f"(depth A={side_a.depth}, depth B={side_b.depth}, expanded={self.actors_expanded})"
                )
                return Meeting(meeting_actor_id, side_a, side_b)

        logger.info(
            f"No connection between {actor_a_id} and {actor_b_id} within {max_degrees} degrees "
            f"(expanded={self.actors_expanded})"
        )
        return None

    async def _expand_level(self, side: Frontier, opposite: Frontier) -> Optional[int]:
        """
        Expand every node of the current level of `side`

        Returns:
            The meeting actor id if a co-star was already seen by the opposite side
        """
        for index in side.next_level():
            current = side.nodes[index]
            co_stars = await self.expander.expand(current.actor_id)
            self.actors_expanded += 1

            for co_star_id, movie in co_stars.items():
                # Check if the other side has seen this actor (MEETING POINT!)
                if co_star_id in opposite:
                    # Add the final hop for path reconstruction
                    side.add(co_star_id, index, movie, enqueue=False)
                    return co_star_id

                if co_star_id not in side:
                    side.add(co_star_id, index, movie)

        return None


class SearchSession:
    """
    Context for one connection search

    Owns the filmography cache and the components that use it. The cache is
    reset when the session is entered and on every exit: success, no path,
    error, or cancellation by a timeout.
    """

    def __init__(
        self,
        provider: MetadataProvider,
        deceased_lookup: Optional[DeceasedLookup] = None,
        movie_limit: int = config.MOVIE_FANOUT_CAP,
        cast_limit: int = config.CAST_PER_MOVIE_CAP
    ):
        self.provider = provider
        self.cache = FilmographyCache(provider.fetch_filmography)
        self.expander = CoStarExpander(self.cache, provider.fetch_movie_cast, movie_limit, cast_limit)
        self.engine = BidirectionalSearchEngine(self.expander)
        self.enrichment = EnrichmentStage(
            provider.fetch_actor_detail,
            deceased_lookup or database.get_deceased_persons
        )

    async def __aenter__(self):
        self.cache.reset()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        logger.debug("Search session closed", extra={"cache": self.cache.get_stats()})
        self.cache.reset()
        return False

    async def find_connection(self, actor_a_id: int, actor_b_id: int,
                              max_degrees: int = config.DEFAULT_MAX_DEGREES) -> Optional[ConnectionResult]:
        meeting = await self.engine.search(actor_a_id, actor_b_id, max_degrees)
        if meeting is None:
            return None

        steps = reconstruct_path(meeting.actor_id, meeting.side_a, meeting.side_b)
        return await self.enrichment.enrich(steps)


async def find_connection(
    provider: MetadataProvider,
    actor_a_id: int,
    actor_b_id: int,
    max_degrees: int = config.DEFAULT_MAX_DEGREES,
    deceased_lookup: Optional[DeceasedLookup] = None
) -> Optional[ConnectionResult]:
    """
    Find the shortest co-star path between two actors

    Args:
        provider: Metadata provider used for every external lookup
        actor_a_id: Starting actor
        actor_b_id: Target actor
        max_degrees: Maximum degrees of separation (default: 6)
        deceased_lookup: Bulk deceased-records lookup (default: the sqlite store)

    Returns:
        ConnectionResult, or None when no connection exists within max_degrees
    """
    start_time = time.time()

    async with SearchSession(provider, deceased_lookup) as session:
        result = await session.find_connection(actor_a_id, actor_b_id, max_degrees)

    elapsed_ms = int((time.time() - start_time) * 1000)
    logger.info(
        f"Connection search {actor_a_id} → {actor_b_id} finished in {elapsed_ms}ms",
        extra={
            "found": result is not None,
            "degrees": result.degrees if result else None,
            "actors_expanded": session.engine.actors_expanded
        }
    )
    return result


async def find_connection_with_timeout(
    provider: MetadataProvider,
    actor_a_id: int,
    actor_b_id: int,
    max_degrees: int = config.DEFAULT_MAX_DEGREES,
    timeout_seconds: float = config.SEARCH_TIMEOUT_SECONDS,
    deceased_lookup: Optional[DeceasedLookup] = None
) -> Optional[ConnectionResult]:
    """
    find_connection bounded by a wall-clock timeout

    Expiry cancels the search task, including the provider call it is
    awaiting, so no further lookups are issued after the deadline.

    Raises:
        SearchTimeout: If the search does not finish within timeout_seconds
    """
    try:
        async with asyncio.timeout(timeout_seconds):
            return await find_connection(provider, actor_a_id, actor_b_id, max_degrees, deceased_lookup)
    except asyncio.TimeoutError as e:
        logger.warning(f"Connection search {actor_a_id} → {actor_b_id} timed out after {timeout_seconds}s")
        raise SearchTimeout(f"Search timed out after {timeout_seconds} seconds") from e
