import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request

import database
from config import settings
from models import Movie
from repository import MOVIE_ERROR_MESSAGE, MovieListRepository
from states import Error, Success
from tmdb import page_fetcher
from viewmodel import (
    DetailsState,
    DetailsViewModel,
    MovieListState,
    MovieListViewModel,
    Navigate,
    Paginate,
)

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await database.init_db(settings.db_path)
    async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
        repository = MovieListRepository(
            page_fetcher(client, settings.tmdb_api_key), settings.db_path
        )
        view_model = MovieListViewModel(repository)
        view_model.start()
        app.state.repository = repository
        app.state.list_view_model = view_model
        logger.info("Movie catalog ready, store at %s", settings.db_path)
        yield
        await view_model.close()


app = FastAPI(lifespan=lifespan)


def get_repository(request: Request) -> MovieListRepository:
    return request.app.state.repository


def get_list_view_model(request: Request) -> MovieListViewModel:
    return request.app.state.list_view_model


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/movies/{category}", response_model=list[Movie])
async def movie_list(
    category: str,
    page: int = 1,
    force: bool = False,
    repository: MovieListRepository = Depends(get_repository),
):
    movies: list[Movie] = []
    async for result in repository.get_movie_list(force, category, page):
        match result:
            case Success(data=data):
                movies = data
            case Error(message=message):
                raise HTTPException(status_code=502, detail=message)
    return movies


@app.get("/movie/{movie_id}", response_model=DetailsState)
async def movie_details(
    movie_id: int, repository: MovieListRepository = Depends(get_repository)
):
    state = await DetailsViewModel(repository).load(movie_id)
    if state.movie is None:
        raise HTTPException(status_code=404, detail=MOVIE_ERROR_MESSAGE)
    return state


@app.get("/state", response_model=MovieListState)
async def list_state(view_model: MovieListViewModel = Depends(get_list_view_model)):
    return view_model.state


@app.post("/paginate/{category}")
async def paginate(
    category: str, view_model: MovieListViewModel = Depends(get_list_view_model)
):
    if category not in view_model.categories:
        raise HTTPException(status_code=404, detail=f"Unknown category: {category}")
    view_model.on_event(Paginate(category=category))
    return {"status": "started", "page": view_model.state.page_for(category)}


@app.post("/navigate")
async def navigate(view_model: MovieListViewModel = Depends(get_list_view_model)):
    view_model.on_event(Navigate())
    return {"visible_category": view_model.state.visible_category}


@app.post("/seen/{index}")
async def item_shown(
    index: int, view_model: MovieListViewModel = Depends(get_list_view_model)
):
    started = view_model.on_item_shown(index)
    return {"status": "started" if started else "idle"}
