"""
Assembly of the count and page statements for a DataTables request.

Both statements share the same FROM, JOIN and WHERE clauses. Only the page
statement is ordered and limited. Identifiers reach SQL through SQLAlchemy
column objects or ``escape_identifier``. Values (search text, limit,
offset) are always bound parameters.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from sqlalchemy import Select, Table, and_, distinct, func, select

from .exceptions import ConfigurationError
from .options import QueryOptions
from .ordering import OrderField, build_order, parse_order, tie_breaker
from .schema import DataTablesRequest
from .search import build_search_where


@dataclass(frozen=True)
class DataTablesQuery:
    count: Select
    page: Select
    order: List[OrderField] = field(default_factory=list)
    scalars: bool = True


def get_table(model: Any) -> Table:
    """Return the Table behind an ORM model (or the Table itself)."""
    if isinstance(model, Table):
        return model
    table = getattr(model, "__table__", None)
    if not isinstance(table, Table):
        raise ConfigurationError(f"{model!r} is not a mapped model or Table")
    return table


def build_query(
    model: Any,
    request_data: DataTablesRequest,
    options: QueryOptions,
    escape_identifier: Callable[[str], str],
    id_column: str = "id",
    log: Optional[logging.Logger] = None,
) -> DataTablesQuery:
    table = get_table(model)
    if id_column not in table.c:
        raise ConfigurationError(f"Table {table.name!r} has no {id_column!r} column")

    # Static query filters
    where = options.where_clauses()
    joins = []

    # Search filters; the joins are only needed by the search fields.
    if request_data.search_value:
        where.append(
            build_search_where(
                table,
                options.search_fields,
                request_data.search_value,
                escape_identifier,
                id_column=id_column,
                log=log,
            )
        )
        joins = options.search_joins

    count_stmt = select(func.count(distinct(table.c[id_column]))).select_from(table)
    page_stmt = select(model).select_from(table).distinct()

    for join in joins:
        count_stmt = count_stmt.join(join.target, join.clause(), isouter=join.isouter)
        page_stmt = page_stmt.join(join.target, join.clause(), isouter=join.isouter)

    if where:
        condition = and_(*where)
        count_stmt = count_stmt.where(condition)
        page_stmt = page_stmt.where(condition)

    # Order
    order = parse_order(request_data)
    order_by = build_order(order, table, escape_identifier)
    if order_by and options.tie_break and id_column not in [name for name, _ in order]:
        order_by.append(tie_breaker(table, id_column))
    if order_by:
        page_stmt = page_stmt.order_by(*order_by)

    # Limit; -1 is the protocol's "all rows".
    if request_data.length is not None and request_data.length >= 0:
        page_stmt = page_stmt.limit(request_data.length)

    # Offset
    if request_data.start is not None:
        page_stmt = page_stmt.offset(request_data.start)

    return DataTablesQuery(
        count=count_stmt,
        page=page_stmt,
        order=order,
        scalars=not isinstance(model, Table),
    )
