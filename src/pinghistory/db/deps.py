from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterator

import pymysql
from fastapi import FastAPI, HTTPException, Request, status
from pydantic import ValidationError
from pymysql.connections import Connection

from ..config import Settings
from ..errors import HistoryWriteError
from ..logger import get_logger
from .database import get_db_connection, initialize_database
from .schemas import MESSAGE_MAX_LENGTH, HistoryRecord

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    App startup:
      - resolve settings once (unless create_app() was given them)
      - create the database and history table, failing startup on any error
    """
    settings = getattr(app.state, "settings", None)
    if settings is None:
        settings = Settings.from_env()
        app.state.settings = settings

    initialize_database(settings)
    yield


def get_settings(request: Request) -> Settings:
    """
    Dependency to retrieve the Settings from app.state.
    """
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise RuntimeError("Settings not available on app.state (lifespan not initialized).")
    return settings


def get_record(path: str) -> HistoryRecord:
    """
    Dependency that turns the request path into a HistoryRecord.

    Rejects paths longer than the column instead of letting the server truncate them.
    """
    try:
        return HistoryRecord(message=path)
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Path exceeds {MESSAGE_MAX_LENGTH} characters ({len(path)})",
        ) from None


def get_db(request: Request) -> Iterator[Connection]:
    """
    FastAPI dependency that yields a connection scoped to the configured database.

    Yields:
        Connection: PyMySQL connection, closed once the request is handled.
    """
    settings = get_settings(request)
    try:
        db = get_db_connection(settings)
    except pymysql.MySQLError as e:
        raise HistoryWriteError(request.path_params.get("path", ""), e) from e
    try:
        yield db
    finally:
        db.close()
