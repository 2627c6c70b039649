# tests/test_04_app_lifecycle.py
import logging

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from main import app, lifespan
from app.core.config import settings, Settings
from app.core.exceptions import (
    AuthCodeError, InvalidInputError, CodeNotFoundError,
    CodeAlreadyUsedError, StorageFailureError,
)
from app.db import initial_data
from app.core.logging import setup_logging
from loguru import logger


async def test_lifespan_opens_and_closes_store(tmp_path, monkeypatch):
    db_file = tmp_path / "lifespan.db"
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{db_file}")
    monkeypatch.setattr(settings, "CREATE_TABLES_ON_STARTUP", True)

    test_app = FastAPI()
    async with lifespan(test_app):
        engine = test_app.state.engine
        assert test_app.state.session_factory is not None
        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        assert "auth_codes" in tables

    assert db_file.exists()


@pytest.mark.parametrize("create_tables", [True, False])
async def test_lifespan_fails_without_backing_store(tmp_path, monkeypatch, create_tables):
    missing_dir = tmp_path / "does-not-exist" / "auth.db"
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{missing_dir}")
    monkeypatch.setattr(settings, "CREATE_TABLES_ON_STARTUP", create_tables)

    test_app = FastAPI()
    with pytest.raises(OperationalError):
        async with lifespan(test_app):
            pass
    assert not hasattr(test_app.state, "engine")


async def test_requests_use_session_from_lifespan(tmp_path, monkeypatch):
    """End to end without dependency overrides: the lifespan's session factory serves requests."""
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'e2e.db'}")
    monkeypatch.setattr(settings, "CREATE_TABLES_ON_STARTUP", True)

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            gen = await client.post(f"{settings.API_PREFIX}/admin/generate", json={"count": 2})
            codes = gen.json()["codes"]
            assert len(codes) == 2

            act = await client.post(
                f"{settings.API_PREFIX}/activate",
                json={"deviceId": "dev-1", "authCode": codes[0]},
            )
            assert act.json()["success"] is True

            ver = await client.post(
                f"{settings.API_PREFIX}/verify",
                json={"deviceId": "dev-1", "authCode": codes[0]},
            )
            assert ver.json() == {"valid": True}


async def test_init_db_script(tmp_path, monkeypatch):
    db_file = tmp_path / "init.db"
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{db_file}")

    await initial_data.init_db()
    assert db_file.exists()
    # Re-running (and dropping first) is safe
    await initial_data.init_db(drop=True)


def test_settings_defaults(monkeypatch):
    for name in ("DATABASE_URL", "API_PREFIX", "MAX_BATCH_SIZE", "CODE_INSERT_ATTEMPTS"):
        monkeypatch.delenv(name, raising=False)
    fresh = Settings(_env_file=None)
    assert fresh.DATABASE_URL.startswith("sqlite+aiosqlite://")
    assert fresh.API_PREFIX == "/api"
    assert fresh.MAX_BATCH_SIZE == 1000
    assert fresh.CODE_INSERT_ATTEMPTS == 5
    assert fresh.CORS_ORIGINS == ["*"]


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:////tmp/auth.db")
    monkeypatch.setenv("MAX_BATCH_SIZE", "50")
    fresh = Settings(_env_file=None)
    assert fresh.DATABASE_URL == "sqlite+aiosqlite:////tmp/auth.db"
    assert fresh.MAX_BATCH_SIZE == 50


def test_exception_messages():
    assert InvalidInputError().message == "Incomplete parameters"
    assert CodeNotFoundError("X").message == "Authorization code does not exist"
    assert CodeAlreadyUsedError("X").code == "X"
    assert StorageFailureError("boom").message == "boom"
    for exc_type in (InvalidInputError, CodeNotFoundError, CodeAlreadyUsedError, StorageFailureError):
        assert issubclass(exc_type, AuthCodeError)


def test_setup_logging_routes_stdlib_records():
    setup_logging("DEBUG")
    messages = []
    sink_id = logger.add(messages.append, level="DEBUG", format="{message}")
    try:
        logging.getLogger("uvicorn.error").warning("address already in use")
    finally:
        logger.remove(sink_id)
    assert any("address already in use" in m for m in messages)
