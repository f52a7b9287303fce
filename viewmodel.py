"""Single-writer session state for the movie list and details screens."""

import asyncio
import logging
import random
from typing import Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from models import Category, Movie
from repository import MovieListRepository
from states import Error, Loading, Resource, Success

logger = logging.getLogger(__name__)

BatchOrder = Callable[[list[Movie]], list[Movie]]


def shuffle_batch(movies: list[Movie]) -> list[Movie]:
    return random.sample(movies, len(movies))


def keep_order(movies: list[Movie]) -> list[Movie]:
    return list(movies)


class MovieListState(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_loading: bool = False
    pages: dict[str, int] = Field(default_factory=dict)
    movie_lists: dict[str, list[Movie]] = Field(default_factory=dict)
    is_current_popular_screen: bool = True

    def page_for(self, category: str) -> int:
        return self.pages.get(category, 1)

    def movies_for(self, category: str) -> list[Movie]:
        return self.movie_lists.get(category, [])

    @property
    def visible_category(self) -> str:
        return Category.POPULAR if self.is_current_popular_screen else Category.UPCOMING


class DetailsState(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_loading: bool = False
    movie: Optional[Movie] = None


class Paginate(BaseModel):
    category: str


class Navigate(BaseModel):
    pass


MovieListUiEvent = Union[Paginate, Navigate]


def reduce_movie_list(
    state: MovieListState,
    category: str,
    resource: Resource,
    batch_order: BatchOrder = shuffle_batch,
) -> MovieListState:
    """Fold one repository state for ``category`` into the list state.

    Success appends the (reordered) batch after the existing movies and moves
    the category's page cursor forward by one. Error only clears the loading
    flag. Loading sets the flag.
    """
    match resource:
        case Loading(is_loading=is_loading):
            return state.model_copy(update={"is_loading": is_loading})
        case Success(data=movies):
            return state.model_copy(
                update={
                    "movie_lists": {
                        **state.movie_lists,
                        category: state.movies_for(category) + batch_order(movies),
                    },
                    "pages": {**state.pages, category: state.page_for(category) + 1},
                }
            )
        case Error():
            return state.model_copy(update={"is_loading": False})
        case _:
            raise TypeError(f"Unknown resource: {resource!r}")


def reduce_details(state: DetailsState, resource: Resource) -> DetailsState:
    match resource:
        case Loading(is_loading=is_loading):
            return state.model_copy(update={"is_loading": is_loading})
        case Success(data=movie):
            return state.model_copy(update={"movie": movie})
        case Error():
            return state.model_copy(update={"is_loading": False})
        case _:
            raise TypeError(f"Unknown resource: {resource!r}")


class MovieListViewModel:
    """Paginated popular/upcoming lists for one screen session.

    A newer request for a category supersedes the one in flight: the old task
    is cancelled and anything it still produces is ignored.
    """

    categories = (Category.POPULAR, Category.UPCOMING)

    def __init__(
        self, repository: MovieListRepository, batch_order: BatchOrder = shuffle_batch
    ) -> None:
        self._repository = repository
        self._batch_order = batch_order
        self._state = MovieListState()
        self._jobs: dict[str, asyncio.Task] = {}
        self._generations: dict[str, int] = {}

    @property
    def state(self) -> MovieListState:
        return self._state

    def start(self) -> None:
        for category in self.categories:
            self._load(category, force_fetch_from_remote=False)

    def on_event(self, event: MovieListUiEvent) -> None:
        match event:
            case Navigate():
                self._state = self._state.model_copy(
                    update={"is_current_popular_screen": not self._state.is_current_popular_screen}
                )
            case Paginate(category=category):
                if category not in self.categories:
                    logger.warning("Ignoring pagination for unknown category %r", category)
                    return
                self._load(category, force_fetch_from_remote=True)

    def on_item_shown(self, index: int) -> bool:
        """Request the next page once the last visible movie is shown and nothing is loading."""
        category = self._state.visible_category
        if index < len(self._state.movies_for(category)) - 1 or self._state.is_loading:
            return False
        self.on_event(Paginate(category=category))
        return True

    async def join(self) -> None:
        """Wait for every request still in flight."""
        while True:
            pending = [job for job in self._jobs.values() if not job.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        for job in self._jobs.values():
            job.cancel()
        await asyncio.gather(*self._jobs.values(), return_exceptions=True)
        self._jobs.clear()

    def _load(self, category: str, force_fetch_from_remote: bool) -> None:
        previous = self._jobs.get(category)
        if previous is not None and not previous.done():
            logger.debug("Superseding in-flight %s request", category)
            previous.cancel()

        generation = self._generations.get(category, 0) + 1
        self._generations[category] = generation
        self._state = self._state.model_copy(update={"is_loading": True})
        page = self._state.page_for(category)
        self._jobs[category] = asyncio.create_task(
            self._collect(category, generation, force_fetch_from_remote, page)
        )

    async def _collect(
        self, category: str, generation: int, force_fetch_from_remote: bool, page: int
    ) -> None:
        stream = self._repository.get_movie_list(force_fetch_from_remote, category, page)
        try:
            async for resource in stream:
                if self._generations.get(category) != generation:
                    logger.debug("Dropping stale %s result", category)
                    return
                self._state = reduce_movie_list(
                    self._state, category, resource, self._batch_order
                )
        finally:
            await stream.aclose()


class DetailsViewModel:
    def __init__(self, repository: MovieListRepository) -> None:
        self._repository = repository
        self._state = DetailsState()

    @property
    def state(self) -> DetailsState:
        return self._state

    async def load(self, movie_id: Optional[int]) -> DetailsState:
        self._state = self._state.model_copy(update={"is_loading": True})
        async for resource in self._repository.get_movie(movie_id if movie_id is not None else -1):
            self._state = reduce_details(self._state, resource)
        return self._state
