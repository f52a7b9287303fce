import logging
from pathlib import Path
from typing import AsyncIterator, Union

import database
from errors import NotFoundError
from mappers import to_movie, to_movie_entity
from models import Movie
from states import Error, Loading, Resource, Success
from tmdb import PageFetcher

logger = logging.getLogger(__name__)

LIST_ERROR_MESSAGE = "Error loading movies"
MOVIE_ERROR_MESSAGE = "Error no such movie"


class MovieListRepository:
    def __init__(self, fetch_page: PageFetcher, db_path: Path = database.DB_PATH) -> None:
        self._fetch_page = fetch_page
        self._db_path = db_path

    async def get_movie_list(
        self, force_fetch_from_remote: bool, category: str, page: int
    ) -> AsyncIterator[Resource]:
        """
        Serve ``category`` from the local store when it has any rows, otherwise
        (or when forced) fetch ``page`` remotely, store it and serve that.

        A cache hit returns every stored movie of the category and ignores
        ``page``.
        """
        yield Loading(is_loading=True)
        yield await self._load_movie_list(force_fetch_from_remote, category, page)
        yield Loading(is_loading=False)

    async def get_movie(self, movie_id: int) -> AsyncIterator[Resource]:
        """Look up one movie in the local store only; there is no remote fallback."""
        yield Loading(is_loading=True)
        try:
            movie = await self._load_movie(movie_id)
        except NotFoundError as exc:
            logger.info("%s", exc)
            yield Error(message=MOVIE_ERROR_MESSAGE, cause=type(exc).__name__)
        except Exception as exc:
            logger.exception("Local store failure while loading movie %s", movie_id)
            yield Error(message=MOVIE_ERROR_MESSAGE, cause=type(exc).__name__)
        else:
            yield Success(data=movie)
        yield Loading(is_loading=False)

    async def _load_movie_list(
        self, force_fetch_from_remote: bool, category: str, page: int
    ) -> Union[Success, Error]:
        try:
            local_movies = await database.get_movie_list_by_category(category, self._db_path)
        except Exception as exc:
            logger.exception("Local store failure while reading %s", category)
            return Error(message=LIST_ERROR_MESSAGE, cause=type(exc).__name__)

        if local_movies and not force_fetch_from_remote:
            logger.debug("Cache hit for %s: %d movies", category, len(local_movies))
            return Success(data=[to_movie(entity, category) for entity in local_movies])

        try:
            response = await self._fetch_page(category, page)
        except Exception as exc:
            logger.warning("Fetching %s page %d failed: %s", category, page, exc)
            return Error(message=LIST_ERROR_MESSAGE, cause=type(exc).__name__)

        entities = [to_movie_entity(dto, category) for dto in response.results]
        try:
            await database.upsert_movie_list(entities, self._db_path)
        except Exception as exc:
            logger.exception("Storing %d %s movies failed", len(entities), category)
            return Error(message=LIST_ERROR_MESSAGE, cause=type(exc).__name__)

        logger.info("Stored %d %s movies from page %d", len(entities), category, page)
        return Success(data=[to_movie(entity, category) for entity in entities])

    async def _load_movie(self, movie_id: int) -> Movie:
        entity = await database.get_movie_by_id(movie_id, self._db_path)
        if entity is None:
            raise NotFoundError(f"No stored movie with id {movie_id}")
        return to_movie(entity, entity.category)
