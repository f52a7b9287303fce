import json
from functools import partial
from typing import Awaitable, Callable

import httpx
from pydantic import ValidationError

from errors import ProtocolError, TransportError
from models import MovieListDto

TMDB_BASE = "https://api.themoviedb.org/3"

PageFetcher = Callable[[str, int], Awaitable[MovieListDto]]


async def get_movie_list(
    client: httpx.AsyncClient, api_key: str, category: str, page: int
) -> MovieListDto:
    """Fetch one page of ``/movie/{category}``. Failures are raised, never retried."""
    try:
        response = await client.get(
            f"{TMDB_BASE}/movie/{category}",
            params={"page": page, "api_key": api_key},
        )
    except httpx.TransportError as exc:
        raise TransportError(f"TMDB unreachable for {category} page {page}: {exc}") from exc

    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ProtocolError(
            f"TMDB returned {response.status_code} for {category} page {page}"
        ) from exc

    try:
        return MovieListDto.model_validate(response.json())
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ProtocolError(f"Unreadable TMDB response for {category} page {page}") from exc


def page_fetcher(client: httpx.AsyncClient, api_key: str) -> PageFetcher:
    """Bind a client and key into the ``(category, page)`` callable the repository uses."""
    return partial(get_movie_list, client, api_key)
