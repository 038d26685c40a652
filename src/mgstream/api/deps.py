"""FastAPI dependencies."""

from fastapi import Header, Request
from sqlalchemy.orm import sessionmaker

from mgstream.db import get_session_factory as _get_session_factory
from mgstream.services.blob_store import ShockClient


def get_session_factory() -> sessionmaker:
    """Session factory for handlers whose work outlives the request (streams)."""
    return _get_session_factory()


def get_shock(request: Request) -> ShockClient:
    """Shock client over the shared httpx.Client from app state."""
    return ShockClient(request.app.state.shock_http)


def get_user(x_forwarded_user: str | None = Header(default=None)) -> str | None:
    """Caller login as asserted by the authenticating proxy."""
    return x_forwarded_user or None


async def get_body(request: Request) -> bytes:
    return await request.body()
