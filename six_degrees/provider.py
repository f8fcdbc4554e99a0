"""
Metadata provider interface

The search core only needs three lookups from the provider (filmography,
movie cast and actor detail). They are described by the MetadataProvider
protocol so tests and alternative backends can stand in for TMDb.
"""
from typing import Any, Dict, List, Protocol

from six_degrees.models import ActorDetail, CastMember, FilmographyEntry


class ProviderUnavailable(Exception):
    """Raised when a provider lookup fails (transport error, bad status, bad body)"""


class MetadataProvider(Protocol):
    """Lookups the search core consumes"""

    async def fetch_filmography(self, actor_id: int) -> List[FilmographyEntry]:
        ...

    async def fetch_movie_cast(self, movie_id: int) -> List[CastMember]:
        ...

    async def fetch_actor_detail(self, actor_id: int) -> ActorDetail:
        ...

    async def search_people(self, query: str) -> List[Dict[str, Any]]:
        ...
