"""
Six Degrees - FastAPI Application

Thin HTTP surface over the connection search: actor lookup for the search
boxes, the connection endpoint itself and the search history.
"""
import logging

from fastapi import FastAPI, Request, Query, Depends, Path
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from six_degrees import config, database
from six_degrees.models import (
    ActorSearchResponse, ActorSearchResult, ConnectionResponse,
    SearchErrorResponse, SearchListResponse, SearchRecord
)
from six_degrees.provider import MetadataProvider, ProviderUnavailable
from six_degrees.search import SearchTimeout, find_connection_with_timeout
from six_degrees.tmdb import TMDbClient, close_shared_http_client, get_shared_http_client

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler()
    ]
)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)

app = FastAPI(title=config.API_TITLE, version=config.API_VERSION)

# Add rate limit exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware - restrict to specific origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# Security headers middleware
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


@app.on_event("startup")
async def startup():
    database.init_db()


@app.on_event("shutdown")
async def shutdown_http_client():
    """Cleanup: Close the shared HTTP client on application shutdown"""
    await close_shared_http_client()


async def get_provider() -> MetadataProvider:
    return TMDbClient(await get_shared_http_client())


@app.get("/api/actors/search", response_model=ActorSearchResponse)
@limiter.limit(config.ACTOR_SEARCH_RATE_LIMIT)
async def search_actors(
    request: Request,
    q: str = Query("", max_length=100),
    provider: MetadataProvider = Depends(get_provider)
):
    """
    Search actors by name for the connection form

    Queries shorter than two characters return no results without calling TMDb.
    """
    query = q.strip()
    if len(query) < 2:
        return ActorSearchResponse(results=[])

    try:
        people = await provider.search_people(query)
    except ProviderUnavailable as e:
        logger.error("Actor search failed", extra={"query": query, "error": str(e)})
        return JSONResponse(status_code=500, content={"error": {"message": "Failed to search actors"}})

    # Filter to actors only
    actors = [person for person in people if person.get("known_for_department") == "Acting"][:10]
    return ActorSearchResponse(results=[
        ActorSearchResult(
            id=person["id"],
            name=person.get("name", ""),
            profile_path=person.get("profile_path"),
            known_for=[
                item.get("title") or item.get("name")
                for item in person.get("known_for", [])
                if item.get("title") or item.get("name")
            ][:3]
        )
        for person in actors
    ])


def _record_search(actor_a_id, actor_b_id, path, degrees, success, error_message=None):
    """Save a search to the history; failures are logged, never surfaced"""
    try:
        return database.save_search(
            actor_a_id=actor_a_id,
            actor_b_id=actor_b_id,
            path=path,
            degrees=degrees,
            success=success,
            error_message=error_message
        )
    except Exception as e:
        logger.error("Failed to save search to database", extra={"error": str(e)})
        return None


@app.get("/api/connection/{actor_a_id}/{actor_b_id}", response_model=ConnectionResponse)
@limiter.limit(config.CONNECTION_RATE_LIMIT)
async def get_connection(
    request: Request,
    actor_a_id: int = Path(..., gt=0),
    actor_b_id: int = Path(..., gt=0),
    max_degrees: int = Query(config.DEFAULT_MAX_DEGREES, ge=1, le=config.DEFAULT_MAX_DEGREES),
    provider: MetadataProvider = Depends(get_provider)
):
    """
    Find the shortest co-star path between two actors

    Returns found=false when no connection exists within max_degrees, 408
    when the search exceeds SEARCH_TIMEOUT_SECONDS and 500 on other failures.
    """
    logger.info(
        "Starting connection search",
        extra={
            "actor_a_id": actor_a_id,
            "actor_b_id": actor_b_id,
            "max_degrees": max_degrees,
            "timeout": config.SEARCH_TIMEOUT_SECONDS
        }
    )

    try:
        result = await find_connection_with_timeout(
            provider,
            actor_a_id,
            actor_b_id,
            max_degrees=max_degrees,
            timeout_seconds=config.SEARCH_TIMEOUT_SECONDS
        )
    except SearchTimeout:
        error_msg = "Search timed out. Try different actors."
        search_id = _record_search(actor_a_id, actor_b_id, [], None, False, error_msg)
        return JSONResponse(
            status_code=408,
            content=SearchErrorResponse(search_id=search_id, error=error_msg).model_dump()
        )
    except Exception as e:
        logger.error("Connection search failed", extra={"error": str(e)}, exc_info=True)
        error_msg = "Failed to find connection"
        search_id = _record_search(actor_a_id, actor_b_id, [], None, False, error_msg)
        return JSONResponse(
            status_code=500,
            content=SearchErrorResponse(search_id=search_id, error=error_msg).model_dump()
        )

    if result is None:
        message = f"No connection found within {max_degrees} degrees of separation"
        search_id = _record_search(actor_a_id, actor_b_id, [], None, False, message)
        return ConnectionResponse(found=False, search_id=search_id, message=message)

    search_id = _record_search(
        actor_a_id,
        actor_b_id,
        [segment.actor.id for segment in result.path],
        result.degrees,
        True
    )
    return ConnectionResponse(
        found=True,
        search_id=search_id,
        degrees=result.degrees,
        path=result.path,
        total_deceased=result.total_deceased,
        deceased_on_path=result.deceased_on_path
    )


@app.get('/api/searches', response_model=SearchListResponse)
async def get_searches(limit: int = Query(50, ge=1, le=500)):
    """Get recent connection searches"""
    searches = database.get_recent_searches(limit=limit)
    return SearchListResponse(searches=[SearchRecord(**s) for s in searches])


if __name__ == '__main__':
    import uvicorn
    import os
    port = int(os.environ.get('PORT', 8000))
    uvicorn.run(app, host='0.0.0.0', port=port)
