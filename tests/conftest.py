"""Pytest configuration and fixtures"""
import asyncio
from collections import Counter, defaultdict

import pytest
from fastapi.testclient import TestClient

from six_degrees import database, main
from six_degrees.models import ActorDetail, CastMember, FilmographyEntry
from six_degrees.provider import ProviderUnavailable


class StubProvider:
    """
    In-memory MetadataProvider over a fixed co-star graph

    `movies` maps movie id -> cast actor ids in billing order. Every movie is
    dated unless listed in `undated`; popularity defaults to 1.0.
    """

    def __init__(self, movies, popularity=None, undated=(), details=None,
                 failing_movies=(), failing_actors=(), failing_details=(),
                 people=None, delay=0.0):
        self.casts = {movie_id: list(cast) for movie_id, cast in movies.items()}
        self.filmographies = defaultdict(list)
        for movie_id, cast in movies.items():
            entry = FilmographyEntry(
                movie_id=movie_id,
                title=f"Movie {movie_id}",
                release_date=None if movie_id in undated else "2001-05-04",
                popularity=(popularity or {}).get(movie_id, 1.0)
            )
            for actor_id in cast:
                self.filmographies[actor_id].append(entry)

        self.details = details or {}
        self.failing_movies = set(failing_movies)
        self.failing_actors = set(failing_actors)
        self.failing_details = set(failing_details)
        self.people = people or []
        self.delay = delay

        self.filmography_calls = Counter()
        self.cast_calls = []
        self.detail_calls = []
        self.cancelled_calls = []

    async def fetch_filmography(self, actor_id):
        self.filmography_calls[actor_id] += 1
        if actor_id in self.failing_actors:
            raise ProviderUnavailable(f"filmography {actor_id} unavailable")
        return list(self.filmographies.get(actor_id, []))

    async def fetch_movie_cast(self, movie_id):
        self.cast_calls.append(movie_id)
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled_calls.append(movie_id)
                raise
        if movie_id in self.failing_movies:
            raise ProviderUnavailable(f"credits {movie_id} unavailable")
        return [CastMember(actor_id=actor_id, order=i) for i, actor_id in enumerate(self.casts.get(movie_id, []))]

    async def fetch_actor_detail(self, actor_id):
        self.detail_calls.append(actor_id)
        if actor_id in self.failing_details:
            raise ProviderUnavailable(f"person {actor_id} unavailable")
        return self.details.get(actor_id) or ActorDetail(id=actor_id, name=f"Person {actor_id}")

    async def search_people(self, query):
        return self.people


def chain_movies(hops, first_actor=0, first_movie=100):
    """Movies linking actor i to actor i + 1 for `hops` consecutive actors"""
    return {first_movie + i: [first_actor + i, first_actor + i + 1] for i in range(hops)}


def no_deceased_records(actor_ids):
    return {}


@pytest.fixture
def make_provider():
    """Factory for StubProvider instances"""
    return StubProvider


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Fresh sqlite database per test"""
    monkeypatch.setattr(database, "DATABASE_NAME", str(tmp_path / "six_degrees_test.db"))
    database.init_db()
    return database


@pytest.fixture
def client(temp_db, monkeypatch):
    """Test client for the FastAPI app"""
    monkeypatch.setattr(main.limiter, "enabled", False)
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()
