from types import SimpleNamespace
from typing import Any, List, Sequence

import pytest
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import declarative_base, relationship

from datatables_sql import DataTablesSettings
from datatables_sql.database import DatabaseBackend

Base = declarative_base()


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    api_key = Column(String, nullable=False)
    created_at = Column(DateTime)
    role_id = Column(Integer, ForeignKey("roles.id"))

    role = relationship(Role)


class FakeBackend(DatabaseBackend):
    """Records the statements it is given instead of touching a database."""

    def __init__(self, total: int = 0, records: Sequence[Any] = ()):
        super().__init__(None)
        self.total = total
        self.records = list(records)
        self.count_statements: List[Any] = []
        self.fetch_calls: List[dict] = []

    async def count(self, stmt):
        self.count_statements.append(stmt)
        return self.total

    async def fetch(self, stmt, preload=(), scalars=True):
        self.fetch_calls.append({"stmt": stmt, "preload": preload, "scalars": scalars})
        return self.records


def compile_sql(stmt):
    """Compile a statement for PostgreSQL; returns (sql, bound params)."""
    compiled = stmt.compile(dialect=postgresql.dialect())
    return str(compiled), compiled.params


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    for name in ("DATATABLES_MAX_LENGTH", "DATATABLES_ID_COLUMN", "DATATABLES_LOG_LEVEL", "DATATABLES_LOG_SQL"):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def settings():
    return DataTablesSettings()


@pytest.fixture
def user_model():
    return User


@pytest.fixture
def role_model():
    return Role


@pytest.fixture
def escape_identifier():
    return DatabaseBackend(None).escape_identifier


@pytest.fixture
def make_record():
    def _make(**values):
        return SimpleNamespace(**values)

    return _make


@pytest.fixture
def sql():
    return compile_sql


@pytest.fixture
def backend_factory():
    return FakeBackend
