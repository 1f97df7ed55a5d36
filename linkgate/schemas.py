"""
Pydantic schemas for linkgate API responses.
"""

from pydantic import BaseModel


class StatusResponse(BaseModel):
    """Envelope for operations without payload (reload)."""
    ok: bool
    message: str


class Envelope(StatusResponse):
    """Envelope for link creation; `content` carries the token on success."""
    content: str = ""
