"""
Pydantic schemas for the HTTP request/response bodies.
"""

from pydantic import BaseModel


class ShortenRequest(BaseModel):
    """Payload for POST /api/shorten."""
    url: str


class ShortenResponse(BaseModel):
    result: str


class URLResponse(BaseModel):
    """One entry of GET /api/user/urls."""
    short_url: str
    original_url: str


class BatchShortenRequest(BaseModel):
    correlation_id: str
    original_url: str


class BatchShortenResponse(BaseModel):
    correlation_id: str
    short_url: str
