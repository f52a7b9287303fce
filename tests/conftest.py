import asyncio
import os
from typing import Callable
from pathlib import Path

import pytest

os.environ.setdefault("TMDB_API_KEY", "test-key")

from models import Movie, MovieDto, MovieListDto  # noqa: E402
from states import Error, Loading, Success  # noqa: E402


@pytest.fixture
def tmp_db(tmp_path) -> Path:
    """Returns path to a temporary SQLite database file."""
    return tmp_path / "test.db"


@pytest.fixture
def popular_page() -> dict:
    """A TMDB ``/movie/popular`` page with two results."""
    return {
        "page": 1,
        "results": [
            {
                "id": 5,
                "title": "Four Rooms",
                "original_title": "Four Rooms",
                "overview": "It's Ted the Bellhop's first night on the job.",
                "backdrop_path": "/3EpZ2ksjijmdr8BhISP03PYzNCW.jpg",
                "poster_path": "/75aHn1NOYXh4M7L5shoeQ6NGykP.jpg",
                "release_date": "1995-12-09",
                "original_language": "en",
                "vote_average": 5.9,
                "popularity": 21.5,
                "vote_count": 2600,
                "adult": False,
                "video": False,
                "genre_ids": [80, 35],
            },
            {
                "id": 7,
                "title": "Dancer in the Dark",
                "original_title": "Dancer in the Dark",
                "overview": "Selma, a Czech immigrant on the verge of blindness.",
                "backdrop_path": "/8gSzXGxKJkG2a1Fq6ZqNAe4mKqB.jpg",
                "poster_path": "/8Wdd3fQfbbQeoSfWpHrDfeFqsNV.jpg",
                "release_date": "2000-09-01",
                "original_language": "en",
                "vote_average": 7.9,
                "popularity": 15.2,
                "vote_count": 1800,
                "adult": False,
                "video": False,
                "genre_ids": [18, 80],
            },
        ],
        "total_pages": 500,
        "total_results": 10000,
    }


@pytest.fixture
def popular_dto(popular_page) -> MovieListDto:
    return MovieListDto.model_validate(popular_page)


def make_movie(movie_id: int, category: str = "popular") -> Movie:
    return Movie(
        id=movie_id,
        title=f"Movie {movie_id}",
        original_title=f"Movie {movie_id}",
        overview="",
        backdrop_path="",
        poster_path="",
        release_date="2024-01-01",
        original_language="en",
        vote_average=6.5,
        popularity=10.0,
        vote_count=100,
        adult=False,
        video=False,
        genre_ids=[28],
        category=category,
    )


def make_dto(movie_id: int, **overrides) -> MovieDto:
    data = {"id": movie_id, "title": f"Movie {movie_id}", "genre_ids": [28, 12]}
    data.update(overrides)
    return MovieDto(**data)


class FakeRepository:
    """Serves ``batch_size`` new movies per call, numbering ids per category."""

    def __init__(self, batch_size=2, fail=False):
        self.batch_size = batch_size
        self.fail = fail
        self.calls = []
        self._next_id = {"popular": 100, "upcoming": 200}
        self.gates: dict[int, asyncio.Event] = {}
        self.before_result: dict[int, Callable[[], None]] = {}

    async def get_movie_list(self, force_fetch_from_remote, category, page):
        call_number = len(self.calls)
        self.calls.append((force_fetch_from_remote, category, page))
        yield Loading(is_loading=True)
        gate = self.gates.get(call_number)
        if gate is not None:
            await gate.wait()
        hook = self.before_result.get(call_number)
        if hook is not None:
            hook()
        if self.fail:
            yield Error(message="Error loading movies")
        else:
            start = self._next_id[category]
            self._next_id[category] += self.batch_size
            yield Success(
                data=[make_movie(i, category) for i in range(start, start + self.batch_size)]
            )
        yield Loading(is_loading=False)

    async def get_movie(self, movie_id):
        yield Loading(is_loading=True)
        if movie_id == 5:
            yield Success(data=make_movie(5, "top_rated"))
        else:
            yield Error(message="Error no such movie")
        yield Loading(is_loading=False)
