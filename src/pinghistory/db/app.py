from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..config import Settings
from ..errors import HistoryWriteError
from ..logger import get_logger
from .deps import lifespan
from .routes import router

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        settings: Resolved settings. If None, they are read from the environment
                  when the app starts.
    """
    app = FastAPI(
        title="Ping History",
        version=__version__,
        lifespan=lifespan,
        # every path belongs to the recorder, so no /docs, /redoc or /openapi.json
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
    )
    if settings is not None:
        app.state.settings = settings

    @app.exception_handler(HistoryWriteError)
    async def history_write_failed(request: Request, exc: HistoryWriteError) -> PlainTextResponse:
        logger.error("%s %s: %s", request.method, request.url.path, exc)
        return PlainTextResponse(
            f"Failed to insert value: {exc.message}\n",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
        return PlainTextResponse(f"{exc.detail}\n", status_code=exc.status_code, headers=exc.headers)

    app.include_router(router)
    return app


# ASGI entrypoint (uvicorn pinghistory.db.app:app)
app = create_app()
