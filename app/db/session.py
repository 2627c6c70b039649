# auth_code_api/app/db/session.py
from typing import AsyncGenerator

from fastapi import Request
from loguru import logger
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings
from app.db.base import Base


def create_engine(database_url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """Builds the engine for the auth code store. Called once per process (lifespan)."""
    url = database_url or settings.DATABASE_URL
    return create_async_engine(
        url,
        echo=settings.SQL_ECHO if echo is None else echo,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


async def check_connection(engine: AsyncEngine) -> None:
    """Opens and closes one connection; create_async_engine alone never touches the store."""
    async with engine.connect():
        pass


async def init_models(engine: AsyncEngine) -> None:
    """Creates missing tables. Any error here is fatal for startup."""
    # Registers AuthCode on Base.metadata
    from app.models import auth_code  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("auth_codes table ready.")


async def dispose_engine(engine: AsyncEngine) -> None:
    await engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: one AsyncSession per request, taken from the
    session factory the lifespan stored on app.state.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        yield session
