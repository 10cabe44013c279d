"""
Tests for the DataTables pipeline.

The store is replaced by a backend that records statements, so these tests
cover validation gating, envelope construction and record serialization.
"""

import logging
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import selectinload

from datatables_sql import (
    ConfigurationError,
    DataTables,
    DataTablesSettings,
    QueryOptions,
    SQLAlchemyBackend,
    ValidationError,
)


class UserSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str


class PublicRecord:
    def __init__(self, name):
        self.name = name

    def as_public_json(self):
        return {"name": self.name}


@pytest.fixture
def options():
    return QueryOptions(search_fields=["name", "email"], order_fields=["name", "created_at"])


@pytest.fixture
def make_datatables(user_model, options, settings, backend_factory):
    def _make(total=0, records=(), **kwargs):
        backend = backend_factory(total=total, records=records)
        kwargs.setdefault("options", options)
        kwargs.setdefault("settings", settings)
        return DataTables(None, user_model, db_backend=backend, **kwargs), backend

    return _make


class TestProcess:
    @pytest.mark.asyncio
    async def test_envelope(self, make_datatables):
        datatables, backend = make_datatables(total=2, records=[PublicRecord("a"), PublicRecord("b")])
        response = await datatables.process({"draw": "4", "length": "10", "start": "0"})

        assert response.model_dump() == {
            "draw": 4,
            "recordsTotal": 2,
            "recordsFiltered": 2,
            "data": [{"name": "a"}, {"name": "b"}],
        }
        assert len(backend.count_statements) == 1
        assert len(backend.fetch_calls) == 1

    @pytest.mark.asyncio
    async def test_empty_page_serializes_as_array(self, make_datatables):
        datatables, _ = make_datatables()
        response = await datatables.process({})
        assert response.data == []
        assert response.model_dump_json() == '{"draw":0,"recordsTotal":0,"recordsFiltered":0,"data":[]}'

    @pytest.mark.asyncio
    async def test_draw_defaults_to_zero(self, make_datatables):
        datatables, _ = make_datatables()
        assert (await datatables.process({})).draw == 0
        assert (await datatables.process({"draw": ""})).draw == 0

    @pytest.mark.asyncio
    async def test_draw_is_echoed_as_number(self, make_datatables):
        datatables, _ = make_datatables()
        assert (await datatables.process({"draw": "17"})).draw == 17
        assert (await datatables.process({"draw": 18})).draw == 18

    @pytest.mark.asyncio
    async def test_totals_are_equal(self, make_datatables):
        datatables, _ = make_datatables(total=31)
        response = await datatables.process({"search": {"value": "bob"}})
        assert response.recordsTotal == response.recordsFiltered == 31

    @pytest.mark.asyncio
    async def test_large_totals_become_strings(self, make_datatables):
        datatables, _ = make_datatables(total=2**60)
        response = await datatables.process({})
        assert response.recordsTotal == "1152921504606846976"
        assert response.recordsFiltered == "1152921504606846976"

    @pytest.mark.asyncio
    async def test_validation_failure_executes_nothing(self, make_datatables):
        datatables, backend = make_datatables()
        params = {"columns": {"0": {"data": "password"}}, "order": {"0": {"column": "0"}}}

        with pytest.raises(ValidationError) as excinfo:
            await datatables.process(params)

        assert excinfo.value.as_dicts() == [
            {
                "field": "columns",
                "label": "columns[0][data]",
                "message": "is not a valid orderable column name",
            }
        ]
        assert backend.count_statements == []
        assert backend.fetch_calls == []

    @pytest.mark.asyncio
    async def test_schema_serialization(self, make_datatables, user_model, options, make_record):
        record_id = uuid.uuid4()
        datatables, _ = make_datatables(
            total=1,
            records=[make_record(id=record_id, name="Ada", email="ada@example.com")],
            options=QueryOptions(order_fields=options.order_fields, schema=UserSchema),
        )
        response = await datatables.process({})
        assert response.data == [{"id": str(record_id), "name": "Ada"}]

    @pytest.mark.asyncio
    async def test_preload_is_passed_to_backend(self, make_datatables, user_model):
        preload = [selectinload(user_model.role)]
        datatables, backend = make_datatables(options=QueryOptions(preload=preload))
        await datatables.process({})
        assert backend.fetch_calls[0]["preload"] == preload
        assert backend.fetch_calls[0]["scalars"] is True

    @pytest.mark.asyncio
    async def test_identical_requests_give_identical_envelopes(self, make_datatables):
        datatables, _ = make_datatables(total=1, records=[PublicRecord("a")])
        params = {"draw": "1", "search": {"value": "a"}, "columns": {"0": {"data": "name"}}, "order": {"0": {"column": "0"}}}
        assert await datatables.process(params) == await datatables.process(params)

    @pytest.mark.asyncio
    async def test_log_sql(self, make_datatables):
        logger = MagicMock(spec=logging.Logger)
        datatables, _ = make_datatables(settings=DataTablesSettings(LOG_SQL=True), logger=logger)
        await datatables.process({})
        assert logger.debug.call_count == 2

    @pytest.mark.asyncio
    async def test_store_errors_propagate(self, make_datatables):
        datatables, backend = make_datatables()
        backend.count = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("gone")))
        with pytest.raises(OperationalError):
            await datatables.process({})


class TestConfiguration:
    def test_requires_session_or_backend(self, user_model):
        with pytest.raises(ConfigurationError):
            DataTables(None, user_model)

    def test_default_backend(self, user_model):
        session = AsyncMock()
        datatables = DataTables(session, user_model)
        assert isinstance(datatables.db_backend, SQLAlchemyBackend)
        assert datatables.db_backend.db_session is session

    def test_options_from_dict(self, user_model):
        datatables = DataTables(AsyncMock(), user_model, {"search_fields": ["name"], "order_fields": ["name"]})
        assert [field.name for field in datatables.options.search_fields] == ["name"]

    def test_invalid_options(self, user_model):
        with pytest.raises(ConfigurationError):
            DataTables(AsyncMock(), user_model, {"search_fields": [{"name": "api_key", "prefix_length": 0}]})

    def test_missing_id_column(self, user_model):
        with pytest.raises(ConfigurationError):
            DataTables(AsyncMock(), user_model, {"id_column": "uuid"})

    def test_id_column_from_settings(self, user_model):
        with pytest.raises(ConfigurationError):
            DataTables(AsyncMock(), user_model, settings=DataTablesSettings(ID_COLUMN="pk"))

    def test_preload_requires_model(self, user_model):
        with pytest.raises(ConfigurationError):
            DataTables(AsyncMock(), user_model.__table__, {"preload": [selectinload(user_model.role)]})

    def test_unserializable_record(self, user_model, make_record):
        datatables = DataTables(AsyncMock(), user_model)
        with pytest.raises(ConfigurationError):
            datatables.serialize(make_record(name="x"))

    def test_row_serialization(self, user_model):
        row = MagicMock(spec=["_mapping"])
        row._mapping = {"id": 1, "name": "x"}
        datatables = DataTables(AsyncMock(), user_model)
        assert datatables.serialize(row) == {"id": 1, "name": "x"}
