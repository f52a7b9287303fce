from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Category:
    POPULAR = "popular"
    UPCOMING = "upcoming"


class MovieDto(BaseModel):
    """One entry of the ``results`` array returned by ``/movie/{category}``."""

    id: Optional[int] = None
    title: Optional[str] = None
    original_title: Optional[str] = None
    overview: Optional[str] = None
    backdrop_path: Optional[str] = None
    poster_path: Optional[str] = None
    release_date: Optional[str] = None
    original_language: Optional[str] = None
    vote_average: Optional[float] = None
    popularity: Optional[float] = None
    vote_count: Optional[int] = None
    adult: Optional[bool] = None
    video: Optional[bool] = None
    genre_ids: Optional[list[int]] = None

    @field_validator("genre_ids", mode="before")
    @classmethod
    def _drop_malformed_genre_ids(cls, value):
        # Anything but a list of plain ints is treated as "unknown" rather than failing the page.
        if isinstance(value, list) and all(
            isinstance(g, int) and not isinstance(g, bool) for g in value
        ):
            return value
        return None


class MovieListDto(BaseModel):
    page: int = 0
    results: list[MovieDto] = Field(default_factory=list)
    total_pages: int = 0
    total_results: int = 0


class MovieEntity(BaseModel):
    id: int
    title: str
    original_title: str
    overview: str
    backdrop_path: str
    poster_path: str
    release_date: str
    original_language: str
    vote_average: float
    popularity: float
    vote_count: int
    adult: bool
    video: bool
    genre_ids: str  # comma-joined, e.g. "28,12"
    category: str


class Movie(BaseModel):
    id: int
    title: str
    original_title: str
    overview: str
    backdrop_path: str
    poster_path: str
    release_date: str
    original_language: str
    vote_average: float
    popularity: float
    vote_count: int
    adult: bool
    video: bool
    genre_ids: list[int] = Field(default_factory=list)
    category: str
