from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from fastapi.routing import APIRoute
from pymysql.connections import Connection

from ..config import Settings
from ..logger import get_logger
from .database import insert_message
from .deps import get_db, get_record, get_settings
from .schemas import HistoryRecord

logger = get_logger(__name__)


class AnyMethodRoute(APIRoute):
    """
    APIRoute that matches every HTTP method, including non-standard ones.

    Starlette only filters on `methods` when it is set, so clearing it after
    FastAPI has built the endpoint lets TRACE, PROPFIND or FOO through too.
    Such routes are kept out of the OpenAPI schema, which needs a method list.
    """

    def __init__(self, path: str, endpoint: Any, **kwargs: Any) -> None:
        kwargs["include_in_schema"] = False
        super().__init__(path, endpoint, **kwargs)
        self.methods = None


router = APIRouter(tags=["history"], route_class=AnyMethodRoute)


@router.api_route("/{path:path}", response_class=PlainTextResponse)
def record_path(
    record: HistoryRecord = Depends(get_record),
    settings: Settings = Depends(get_settings),
    db: Connection = Depends(get_db),
) -> PlainTextResponse:
    """
    Store the request path in the history table and echo it back.
    """
    insert_message(db, settings.database, record.message)
    logger.debug("Recorded %r", record.message)
    return PlainTextResponse(f"Value inserted: {record.message}\n")
