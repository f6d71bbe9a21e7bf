"""
Unit tests for FastAPI application lifespan management.

Tests verify that startup creates the database tables and that a failing
database does not prevent the server from starting.
"""

from unittest.mock import AsyncMock, patch

from fastapi import FastAPI
from sqlalchemy import inspect

from character_figure.core.database.utils import create_all, create_engine


class TestLifespan:
    async def test_startup_initializes_database(self):
        from character_figure.server.main import lifespan

        with patch("character_figure.server.main.init_db", new_callable=AsyncMock) as mock_init_db:
            async with lifespan(FastAPI()):
                mock_init_db.assert_awaited_once()

    async def test_startup_survives_database_failure(self):
        from character_figure.server.main import lifespan

        with (
            patch("character_figure.server.main.init_db", new_callable=AsyncMock) as mock_init_db,
            patch("character_figure.server.main.logger") as mock_logger,
        ):
            mock_init_db.side_effect = ConnectionError("database unreachable")

            async with lifespan(FastAPI()):
                pass

        mock_logger.error.assert_called_once()
        assert "Database initialization failed" in mock_logger.error.call_args[0][0]
        assert "Shutting down" in mock_logger.info.call_args_list[-1][0][0]


async def test_create_all_registers_every_table():
    engine = create_engine("sqlite+aiosqlite:///:memory:")

    await create_all(engine)

    async with engine.connect() as conn:
        tables = set(await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))
    await engine.dispose()

    assert {
        "users",
        "orders",
        "credits",
        "character_generations",
        "character_gallery",
        "gallery_interactions",
        "user_preferences",
        "character_templates",
        "subscriptions",
        "video_generations",
    } <= tables
