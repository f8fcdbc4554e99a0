"""
Display metadata for the actors on a found path
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List

from six_degrees.models import ActorDetail, ConnectionResult, DeceasedRecord, PathActor, PathSegment
from six_degrees.paths import PathStep, outgoing_movies
from six_degrees.provider import ProviderUnavailable

logger = logging.getLogger(__name__)

ActorDetailFetcher = Callable[[int], Awaitable[ActorDetail]]
DeceasedLookup = Callable[[List[int]], Dict[int, DeceasedRecord]]


class EnrichmentStage:
    """
    Turns reconstructed path steps into a ConnectionResult

    Failures are local: an actor whose detail lookup fails is shown as a
    placeholder, and a failing deceased-records lookup only leaves the
    detailed deceased list empty.
    """

    def __init__(self, detail_fetcher: ActorDetailFetcher, deceased_lookup: DeceasedLookup):
        self.detail_fetcher = detail_fetcher
        self.deceased_lookup = deceased_lookup

    async def _path_actor(self, actor_id: int) -> PathActor:
        try:
            person = await self.detail_fetcher(actor_id)
        except ProviderUnavailable as e:
            logger.warning(f"Failed to get details for actor {actor_id}: {e}")
            return PathActor(id=actor_id, name=f"Actor {actor_id}", profile_path=None, is_deceased=False)

        return PathActor(
            id=actor_id,
            name=person.name,
            profile_path=person.profile_path,
            is_deceased=person.is_deceased
        )

    async def _deceased_records(self, actor_ids: List[int]) -> List[DeceasedRecord]:
        if not actor_ids:
            return []
        try:
            # The lookup is blocking sqlite I/O
            records = await asyncio.to_thread(self.deceased_lookup, actor_ids)
        except Exception as e:
            logger.error(f"Deceased records lookup failed: {e}", exc_info=True)
            return []
        # Deceased actors missing from the store are simply not detailed
        return [records[actor_id] for actor_id in actor_ids if actor_id in records]

    async def enrich(self, steps: List[PathStep]) -> ConnectionResult:
        """
        Attach actor details and deceased information to a path

        Args:
            steps: Ordered (actor id, incoming movie) steps from A to B

        Returns:
            ConnectionResult with degrees == len(path) - 1
        """
        movies = outgoing_movies(steps)
        path = []
        for (actor_id, _), movie in zip(steps, movies):
            actor = await self._path_actor(actor_id)
            path.append(PathSegment(actor=actor, movie=movie))

        deceased_ids = [segment.actor.id for segment in path if segment.actor.is_deceased]

        return ConnectionResult(
            degrees=len(path) - 1,
            path=path,
            total_deceased=len(deceased_ids),
            deceased_on_path=await self._deceased_records(deceased_ids)
        )
