from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from six_degrees.utils import release_year


class FilmographyEntry(BaseModel):
    """One movie credit from an actor's filmography"""
    movie_id: int
    title: str
    release_date: Optional[str] = None  # Raw provider value, may be empty
    popularity: float = 0.0

    @property
    def year(self) -> Optional[int]:
        return release_year(self.release_date)


class CastMember(BaseModel):
    """Cast credit of a movie, in billing order"""
    actor_id: int
    name: Optional[str] = None
    order: Optional[int] = None


class ActorDetail(BaseModel):
    """Actor detail record from the metadata provider"""
    id: int
    name: str
    profile_path: Optional[str] = None
    deathday: Optional[str] = None

    @property
    def is_deceased(self) -> bool:
        return bool(self.deathday)


class DeceasedRecord(BaseModel):
    """Detailed record from the deceased-persons store"""
    id: int
    name: str
    deathday: Optional[str] = None
    cause_of_death: Optional[str] = None
    age_at_death: Optional[int] = None


class PathActor(BaseModel):
    """Actor shown on a connection path"""
    id: int
    name: str
    profile_path: Optional[str] = None
    is_deceased: bool = False


class PathMovie(BaseModel):
    """Movie linking two adjacent actors"""
    id: int
    title: str
    year: Optional[int] = None
    poster_path: Optional[str] = None  # Never resolved during reconstruction


class PathSegment(BaseModel):
    """An actor plus the movie leading to the next actor (None for the last one)"""
    actor: PathActor
    movie: Optional[PathMovie] = None


class ConnectionResult(BaseModel):
    """Shortest connection between two actors"""
    degrees: int = Field(..., ge=0)
    path: List[PathSegment]
    total_deceased: int = 0
    deceased_on_path: List[DeceasedRecord] = []


class ConnectionResponse(BaseModel):
    """Response model for the connection endpoint"""
    found: bool
    search_id: Optional[int] = None
    degrees: Optional[int] = None
    path: List[PathSegment] = []
    total_deceased: int = 0
    deceased_on_path: List[DeceasedRecord] = []
    message: Optional[str] = None


class SearchErrorResponse(BaseModel):
    """Response model for failed connection searches"""
    success: bool = False
    search_id: Optional[int] = None
    error: str


class ActorSearchResult(BaseModel):
    """Actor match for the search box"""
    id: int
    name: str
    profile_path: Optional[str] = None
    known_for: List[str] = []


class ActorSearchResponse(BaseModel):
    """Response model for actor search"""
    results: List[ActorSearchResult]


class SearchRecord(BaseModel):
    """Database search record"""
    id: int
    actor_a_id: int
    actor_b_id: int
    degrees: Optional[int] = None
    path: List[int] = []
    success: bool
    error_message: Optional[str] = None
    created_at: datetime


class SearchListResponse(BaseModel):
    """Response model for list of searches"""
    searches: List[SearchRecord]
