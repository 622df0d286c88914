"""
Backend package entry.

Expose the FastAPI app factory for ASGI servers (uvicorn/gunicorn).
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
