"""Standalone Session Factory — async sessions for scripts and fixtures outside a request.

Invariants:
    - URL and echo fall back to Settings when not given explicitly
    - Sessions keep loaded attributes after commit (expire_on_commit=False),
      matching DatabaseSessionManager
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from phial.config import get_settings


def create_session_factory(
    database_url: str | None = None, *, echo: bool | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to its own engine; dispose via factory.kw["bind"]."""
    settings = get_settings()
    engine = create_async_engine(
        database_url or settings.database_url,
        echo=settings.database_echo if echo is None else echo,
    )
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
