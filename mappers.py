import logging
from typing import Optional

from errors import MalformedStoredDataError
from models import Movie, MovieDto, MovieEntity

logger = logging.getLogger(__name__)

UNKNOWN_GENRE_IDS = [-1, -2]
UNASSIGNED_ID = -1


def encode_genre_ids(genre_ids: Optional[list[int]]) -> str:
    if genre_ids is None:
        genre_ids = UNKNOWN_GENRE_IDS
    return ",".join(str(g) for g in genre_ids)


def decode_genre_ids(raw: str) -> list[int]:
    """Split a stored ``"28,12"`` column back into ints, all or nothing."""
    if raw == "":
        return []
    try:
        return [int(part) for part in raw.split(",")]
    except (TypeError, ValueError, AttributeError) as exc:
        raise MalformedStoredDataError(f"Bad genre_ids column: {raw!r}") from exc


def to_movie_entity(dto: MovieDto, category: str) -> MovieEntity:
    return MovieEntity(
        id=dto.id if dto.id is not None else UNASSIGNED_ID,
        title=dto.title or "",
        original_title=dto.original_title or "",
        overview=dto.overview or "",
        backdrop_path=dto.backdrop_path or "",
        poster_path=dto.poster_path or "",
        release_date=dto.release_date or "",
        original_language=dto.original_language or "",
        vote_average=dto.vote_average or 0.0,
        popularity=dto.popularity or 0.0,
        vote_count=dto.vote_count or 0,
        adult=dto.adult or False,
        video=dto.video or False,
        genre_ids=encode_genre_ids(dto.genre_ids),
        category=category,
    )


def to_movie(entity: MovieEntity, category: str) -> Movie:
    try:
        genre_ids = decode_genre_ids(entity.genre_ids)
    except MalformedStoredDataError:
        logger.debug("Movie %s has malformed genre_ids, using sentinel", entity.id)
        genre_ids = list(UNKNOWN_GENRE_IDS)

    return Movie(
        id=entity.id,
        title=entity.title,
        original_title=entity.original_title,
        overview=entity.overview,
        backdrop_path=entity.backdrop_path,
        poster_path=entity.poster_path,
        release_date=entity.release_date,
        original_language=entity.original_language,
        vote_average=entity.vote_average,
        popularity=entity.popularity,
        vote_count=entity.vote_count,
        adult=entity.adult,
        video=entity.video,
        genre_ids=genre_ids,
        category=category,
    )
