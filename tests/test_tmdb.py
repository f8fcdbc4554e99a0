"""Tests for the TMDb client"""
import asyncio

import httpx
import pytest

from conftest import no_deceased_records
from six_degrees.provider import ProviderUnavailable
from six_degrees.search import find_connection
from six_degrees.tmdb import TMDbClient


def call(handler, method, *args):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = TMDbClient(http, api_key="test-key", base_url="https://tmdb.test/3")
            return await getattr(client, method)(*args)
    return asyncio.run(run())


def test_fetch_filmography_parses_cast_credits():
    def handler(request):
        assert request.url.path == "/3/person/1/movie_credits"
        assert request.url.params["api_key"] == "test-key"
        return httpx.Response(200, json={"cast": [
            {"id": 10, "title": "Heat", "release_date": "1995-12-15", "popularity": 41.2},
            {"id": 11, "title": "Untitled", "release_date": "", "popularity": 3},
        ]})

    entries = call(handler, "fetch_filmography", 1)

    assert [e.movie_id for e in entries] == [10, 11]
    assert entries[0].year == 1995
    assert entries[0].popularity == 41.2
    assert entries[1].release_date is None


def test_fetch_movie_cast_keeps_billing_order():
    def handler(request):
        assert request.url.path == "/3/movie/10/credits"
        return httpx.Response(200, json={"cast": [
            {"id": 7, "name": "Lead", "order": 0},
            {"id": 3, "name": "Support", "order": 1},
        ]})

    cast = call(handler, "fetch_movie_cast", 10)

    assert [member.actor_id for member in cast] == [7, 3]


def test_fetch_actor_detail():
    def handler(request):
        return httpx.Response(200, json={
            "id": 4, "name": "Someone", "profile_path": "/p.jpg", "deathday": "2004-04-04"
        })

    detail = call(handler, "fetch_actor_detail", 4)

    assert detail.name == "Someone"
    assert detail.is_deceased


def test_error_status_raises_provider_unavailable():
    def handler(request):
        return httpx.Response(503, json={"status_message": "down"})

    with pytest.raises(ProviderUnavailable):
        call(handler, "fetch_movie_cast", 10)


def test_invalid_json_raises_provider_unavailable():
    def handler(request):
        return httpx.Response(200, content=b"<html>oops</html>")

    with pytest.raises(ProviderUnavailable):
        call(handler, "fetch_actor_detail", 4)


def test_transient_connect_error_is_retried():
    attempts = []

    def handler(request):
        attempts.append(request.url.path)
        if len(attempts) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"cast": []})

    assert call(handler, "fetch_movie_cast", 10) == []
    assert len(attempts) == 2


def test_cast_entry_without_id_raises_provider_unavailable():
    def handler(request):
        return httpx.Response(200, json={"cast": [{"name": "no id here"}]})

    with pytest.raises(ProviderUnavailable):
        call(handler, "fetch_movie_cast", 10)


def test_null_body_raises_provider_unavailable():
    def handler(request):
        return httpx.Response(200, content=b"null")

    with pytest.raises(ProviderUnavailable):
        call(handler, "fetch_filmography", 1)


def test_invalid_field_value_raises_provider_unavailable():
    def handler(request):
        return httpx.Response(200, json={"cast": [{"id": "not-a-number", "title": "Heat"}]})

    with pytest.raises(ProviderUnavailable):
        call(handler, "fetch_filmography", 1)


def test_malformed_credits_are_skipped_during_search():
    responses = {
        "/3/person/1/movie_credits": {"cast": [
            {"id": 10, "title": "Broken", "release_date": "2001-01-01", "popularity": 9},
            {"id": 11, "title": "Shared", "release_date": "2002-02-02", "popularity": 5},
        ]},
        "/3/person/2/movie_credits": {"cast": [
            {"id": 11, "title": "Shared", "release_date": "2002-02-02", "popularity": 5},
        ]},
        "/3/movie/10/credits": {"cast": [{"name": "no id here"}]},
        "/3/movie/11/credits": {"cast": [{"id": 1, "name": "One", "order": 0}, {"id": 2, "name": "Two", "order": 1}]},
        "/3/person/1": {"id": 1, "name": "One"},
        "/3/person/2": {"id": 2, "name": "Two"},
    }

    def handler(request):
        if request.url.path not in responses:
            return httpx.Response(404, json={"status_message": "not found"})
        return httpx.Response(200, json=responses[request.url.path])

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = TMDbClient(http, api_key="test-key", base_url="https://tmdb.test/3")
            return await find_connection(client, 1, 2, deceased_lookup=no_deceased_records)

    result = asyncio.run(run())

    assert result.degrees == 1
    assert [segment.actor.name for segment in result.path] == ["One", "Two"]
    assert result.path[0].movie.id == 11
