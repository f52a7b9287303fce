import asyncio
import weakref
from pathlib import Path
from typing import Optional

import aiosqlite

from models import MovieEntity

DB_PATH = Path("data/movies.db")

# Per event loop: an asyncio.Lock binds to the first loop that waits on it.
_write_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = (
    weakref.WeakKeyDictionary()
)

_COLUMNS = (
    "id",
    "title",
    "original_title",
    "overview",
    "backdrop_path",
    "poster_path",
    "release_date",
    "original_language",
    "vote_average",
    "popularity",
    "vote_count",
    "adult",
    "video",
    "genre_ids",
    "category",
)


def _write_lock() -> asyncio.Lock:
    """One write batch at a time per event loop, across all category pipelines."""
    loop = asyncio.get_running_loop()
    lock = _write_locks.get(loop)
    if lock is None:
        lock = _write_locks[loop] = asyncio.Lock()
    return lock


async def init_db(db_path: Path = DB_PATH) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    async with aiosqlite.connect(db_path) as db:
        await db.execute(
            """
            CREATE TABLE IF NOT EXISTS movies (
                id                  INTEGER PRIMARY KEY,
                title               TEXT NOT NULL,
                original_title      TEXT NOT NULL,
                overview            TEXT NOT NULL,
                backdrop_path       TEXT NOT NULL,
                poster_path         TEXT NOT NULL,
                release_date        TEXT NOT NULL,
                original_language   TEXT NOT NULL,
                vote_average        REAL NOT NULL,
                popularity          REAL NOT NULL,
                vote_count          INTEGER NOT NULL,
                adult               INTEGER NOT NULL,
                video               INTEGER NOT NULL,
                genre_ids           TEXT NOT NULL,
                category            TEXT NOT NULL
            )
            """
        )
        await db.execute(
            "CREATE INDEX IF NOT EXISTS idx_movies_category ON movies (category)"
        )
        await db.commit()


async def upsert_movie_list(movies: list[MovieEntity], db_path: Path = DB_PATH) -> None:
    """Insert or replace a batch of movies by id. The batch commits as a whole."""
    if not movies:
        return
    placeholders = ", ".join("?" for _ in _COLUMNS)
    updates = ",\n                ".join(
        f"{col} = excluded.{col}" for col in _COLUMNS if col != "id"
    )
    rows = [tuple(getattr(movie, col) for col in _COLUMNS) for movie in movies]
    async with _write_lock():
        async with aiosqlite.connect(db_path) as db:
            try:
                await db.executemany(
                    f"""
                    INSERT INTO movies ({", ".join(_COLUMNS)})
                    VALUES ({placeholders})
                    ON CONFLICT(id) DO UPDATE SET
                        {updates}
                    """,
                    rows,
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise


async def get_movie_by_id(movie_id: int, db_path: Path = DB_PATH) -> Optional[MovieEntity]:
    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        async with db.execute("SELECT * FROM movies WHERE id = ?", (movie_id,)) as cursor:
            row = await cursor.fetchone()
    return _row_to_movie(row) if row else None


async def get_movie_list_by_category(category: str, db_path: Path = DB_PATH) -> list[MovieEntity]:
    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        async with db.execute("SELECT * FROM movies WHERE category = ?", (category,)) as cursor:
            rows = await cursor.fetchall()
    return [_row_to_movie(row) for row in rows]


def _row_to_movie(row: aiosqlite.Row) -> MovieEntity:
    return MovieEntity(
        id=row["id"],
        title=row["title"],
        original_title=row["original_title"],
        overview=row["overview"],
        backdrop_path=row["backdrop_path"],
        poster_path=row["poster_path"],
        release_date=row["release_date"],
        original_language=row["original_language"],
        vote_average=row["vote_average"],
        popularity=row["popularity"],
        vote_count=row["vote_count"],
        adult=bool(row["adult"]),
        video=bool(row["video"]),
        genre_ids=row["genre_ids"],
        category=row["category"],
    )
