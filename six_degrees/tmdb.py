"""
TMDb metadata provider

TMDbClient implements MetadataProvider over the TMDb v3 REST API.
"""
import asyncio
import logging
from functools import wraps
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from six_degrees import config
from six_degrees.models import ActorDetail, CastMember, FilmographyEntry
from six_degrees.provider import ProviderUnavailable

logger = logging.getLogger(__name__)


# Retry decorator for API calls
def retry_on_failure(max_retries: int = 3, backoff_factor: float = 0.5):
    """
    Decorator to retry async functions on transient failures

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        backoff_factor: Multiplier for exponential backoff (default: 0.5)

    Retries on:
    - httpx.TimeoutException (network timeouts)
    - httpx.ConnectError (connection failures)
    - httpx.ReadError (read failures)

    Does NOT retry on:
    - httpx.HTTPStatusError (4xx, 5xx responses)
    - Other exceptions
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)

                except (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError) as e:
                    if attempt < max_retries - 1:
                        # Exponential backoff: 0.5s, 1s, 2s
                        sleep_time = backoff_factor * (2 ** attempt)
                        logger.warning(
                            "TMDb call failed, retrying",
                            extra={
                                "error_type": type(e).__name__,
                                "retry_delay": sleep_time,
                                "attempt": attempt + 1,
                                "max_retries": max_retries
                            }
                        )
                        await asyncio.sleep(sleep_time)
                        continue

                    logger.error(f"TMDb call failed after {max_retries} attempts", extra={"error": str(e)})
                    raise

        return wrapper
    return decorator


# Shared HTTP client for all requests (connection pooling)
_shared_http_client: Optional[httpx.AsyncClient] = None


async def get_shared_http_client() -> httpx.AsyncClient:
    """
    Get or create the shared HTTP client for TMDb requests.

    Returns:
        httpx.AsyncClient: The shared HTTP client instance
    """
    global _shared_http_client

    if _shared_http_client is None:
        timeout = httpx.Timeout(
            connect=5.0,
            read=15.0,
            write=5.0,
            pool=5.0
        )
        limits = httpx.Limits(
            max_connections=50,
            max_keepalive_connections=10
        )
        _shared_http_client = httpx.AsyncClient(
            timeout=timeout,
            limits=limits,
            headers={
                'User-Agent': 'SixDegreesConnectionFinder/1.0',
                'Accept': 'application/json'
            },
            http2=True
        )

    return _shared_http_client


async def close_shared_http_client():
    """Close the shared HTTP client (application shutdown)"""
    global _shared_http_client
    if _shared_http_client is not None:
        await _shared_http_client.aclose()
        _shared_http_client = None


class TMDbClient:
    """MetadataProvider backed by the TMDb v3 REST API"""

    def __init__(self, client: httpx.AsyncClient, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.client = client
        self.api_key = api_key if api_key is not None else config.TMDB_API_KEY
        self.base_url = (base_url or config.TMDB_BASE_URL).rstrip('/')

    @retry_on_failure(max_retries=3, backoff_factor=0.5)
    async def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        query = dict(params or {})
        query['api_key'] = self.api_key
        response = await self.client.get(f"{self.base_url}{path}", params=query)
        response.raise_for_status()
        return response

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = await self._request(path, params)
            return response.json()
        except httpx.HTTPError as e:
            raise ProviderUnavailable(f"TMDb request failed for {path}: {e}") from e
        except ValueError as e:
            raise ProviderUnavailable(f"TMDb returned invalid JSON for {path}: {e}") from e

    async def _fetch(self, path: str, parse: Callable[[Any], Any], params: Optional[Dict[str, Any]] = None):
        """
        GET a TMDb resource and parse it into models

        A body with the wrong shape (missing keys, null body, values that
        fail validation) is reported as ProviderUnavailable like any other
        failed lookup.
        """
        data = await self._get_json(path, params)
        try:
            return parse(data)
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise ProviderUnavailable(f"TMDb returned malformed data for {path}: {e!r}") from e

    async def fetch_filmography(self, actor_id: int) -> List[FilmographyEntry]:
        """
        Get an actor's movie credits

        Args:
            actor_id: TMDb person id

        Returns:
            Filmography entries as returned by TMDb (unsorted, undated ones included)
        """
        return await self._fetch(f"/person/{actor_id}/movie_credits", _parse_filmography)

    async def fetch_movie_cast(self, movie_id: int) -> List[CastMember]:
        """Get a movie's cast in billing order"""
        return await self._fetch(f"/movie/{movie_id}/credits", _parse_cast)

    async def fetch_actor_detail(self, actor_id: int) -> ActorDetail:
        return await self._fetch(f"/person/{actor_id}", _parse_actor_detail)

    async def search_people(self, query: str) -> List[Dict[str, Any]]:
        """Raw TMDb person search results for a free-text query"""
        return await self._fetch(
            "/search/person",
            lambda data: list(data.get("results", [])),
            {"query": query, "include_adult": "false"}
        )


def _parse_filmography(data) -> List[FilmographyEntry]:
    return [
        FilmographyEntry(
            movie_id=credit["id"],
            title=credit.get("title") or credit.get("original_title") or "",
            release_date=credit.get("release_date") or None,
            popularity=credit.get("popularity") or 0.0
        )
        for credit in data.get("cast", [])
    ]


def _parse_cast(data) -> List[CastMember]:
    return [
        CastMember(actor_id=member["id"], name=member.get("name"), order=member.get("order"))
        for member in data.get("cast", [])
    ]


def _parse_actor_detail(data) -> ActorDetail:
    return ActorDetail(
        id=data["id"],
        name=data.get("name") or f"Actor {data['id']}",
        profile_path=data.get("profile_path"),
        deathday=data.get("deathday")
    )
