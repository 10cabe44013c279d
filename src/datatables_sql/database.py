# datatables_sql/database.py
from typing import Any, List, Optional, Sequence

from sqlalchemy import Select
from sqlalchemy.dialects import postgresql
from sqlalchemy.engine import Dialect


class DatabaseBackend:
    def __init__(self, db_session: Any, dialect: Optional[Dialect] = None):
        self.db_session = db_session
        self.dialect = dialect or postgresql.dialect()

    def escape_identifier(self, name: str) -> str:
        """Quote an identifier, quoting each part of a dotted name separately."""
        preparer = self.dialect.identifier_preparer
        return ".".join(preparer.quote_identifier(part) for part in name.split("."))

    async def count(self, stmt: Select) -> int:
        """Run the count statement and return its single integer result"""
        raise NotImplementedError

    async def fetch(self, stmt: Select, preload: Sequence[Any] = (), scalars: bool = True) -> List[Any]:
        """Run the page statement and return the records"""
        raise NotImplementedError


class SQLAlchemyBackend(DatabaseBackend):
    """Backend over an ``AsyncSession``. Database errors propagate unchanged."""

    def __init__(self, db_session: Any, dialect: Optional[Dialect] = None):
        if dialect is None:
            bound = getattr(getattr(db_session, "bind", None), "dialect", None)
            if isinstance(bound, Dialect):
                dialect = bound
        super().__init__(db_session, dialect)

    async def count(self, stmt: Select) -> int:
        result = await self.db_session.execute(stmt)
        return int(result.scalar_one())

    async def fetch(self, stmt: Select, preload: Sequence[Any] = (), scalars: bool = True) -> List[Any]:
        if preload:
            stmt = stmt.options(*preload)
        result = await self.db_session.execute(stmt)
        if scalars:
            return list(result.scalars().unique().all())
        return list(result.all())
