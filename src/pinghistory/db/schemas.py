from __future__ import annotations

from pydantic import BaseModel, Field

MESSAGE_MAX_LENGTH = 255


class HistoryRecord(BaseModel):
    """
    One row of the `history` table: the request path that was recorded.
    """

    message: str = Field(
        ...,
        max_length=MESSAGE_MAX_LENGTH,
        description="Request path without the leading '/'",
    )
