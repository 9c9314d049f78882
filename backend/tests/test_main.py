"""
Blog Backend — Startup and Request Context Tests
==================================================

What we test:
    ✅ Startup resets the attached store and warns when that store is persistent
    ✅ Client request IDs are kept only when well formed
    ✅ Log records carry the current request ID
"""

import logging

import pytest
from sqlalchemy import inspect

from app import main
from app.database import Database
from app.middleware.request_context import (
    RequestIDLogFilter,
    request_id_var,
    resolve_request_id,
)

RESET_WARNING = "existing data will be lost"


@pytest.fixture
def quiet_logging(monkeypatch):
    # setup_logging() replaces the root handlers, caplog's included
    monkeypatch.setattr(main, "setup_logging", lambda: None)


async def _table_names(database: Database):
    async with database.engine.connect() as conn:
        return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())


class TestLifespan:

    @pytest.mark.asyncio
    async def test_reset_of_file_store_is_warned(self, tmp_path, caplog, quiet_logging):
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'blog.db'}")
        app = main.create_app(database=database)

        with caplog.at_level(logging.WARNING, logger="app.main"):
            async with main.lifespan(app):
                assert sorted(await _table_names(database)) == ["comments", "posts", "users"]

        assert any(RESET_WARNING in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_reset_of_in_memory_store_is_silent(self, caplog, quiet_logging):
        database = Database("sqlite+aiosqlite:///:memory:")
        app = main.create_app(database=database)

        with caplog.at_level(logging.WARNING, logger="app.main"):
            async with main.lifespan(app):
                assert "users" in await _table_names(database)

        assert not any(RESET_WARNING in record.getMessage() for record in caplog.records)


class TestRequestContext:

    @pytest.mark.parametrize("incoming", ["trace-42", "a1b2c3d4", "svc.api_7"])
    def test_well_formed_id_is_kept(self, incoming):
        assert resolve_request_id(incoming) == incoming

    @pytest.mark.parametrize("incoming", [None, "", "x" * 65, "has space", "line\nbreak"])
    def test_other_ids_are_replaced(self, incoming):
        rid = resolve_request_id(incoming)

        assert rid != incoming
        assert len(rid) == 8

    def test_filter_stamps_current_request_id(self):
        record = logging.LogRecord("blog.access", logging.INFO, __file__, 1, "GET /", None, None)
        token = request_id_var.set("trace-42")
        try:
            assert RequestIDLogFilter().filter(record)
        finally:
            request_id_var.reset(token)

        assert record.request_id == "trace-42"

    def test_filter_outside_request(self):
        record = logging.LogRecord("app.main", logging.INFO, __file__, 1, "startup", None, None)

        RequestIDLogFilter().filter(record)

        assert record.request_id == "-"
