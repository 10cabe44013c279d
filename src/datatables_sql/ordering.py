from typing import Callable, List, Optional, Tuple

from sqlalchemy import Table, literal_column
from sqlalchemy.sql.elements import ColumnElement

from .enum import SortDirection
from .schema import DataTablesRequest

OrderField = Tuple[str, SortDirection]


def parse_order(request_data: DataTablesRequest) -> List[OrderField]:
    """
    Resolve the request's order entries into (column name, direction) pairs.

    Entries are consumed by ascending numeric index, so ``order[2]`` comes
    before ``order[10]`` whatever order the client sent them in. Entries whose
    column index does not map to a named column are dropped.
    """
    order_fields: List[OrderField] = []
    if not request_data.order:
        return order_fields

    for order_index in sorted(request_data.order):
        order = request_data.order[order_index]

        column_name = None
        column = request_data.columns.get(order.column) if order.column is not None else None
        if column is not None:
            column_name = column.data

        direction = SortDirection.parse(order.dir)

        if column_name and direction:
            order_fields.append((column_name, direction))

    return order_fields


def resolve_column(
    table: Table, column_path: str, escape_identifier: Callable[[str], str]
) -> ColumnElement:
    """
    Resolve a column name to a SQL expression.

    Names found on the base table resolve to its Column; anything else
    (typically "joined_table.column") becomes an escaped literal identifier.
    """
    if column_path in table.c:
        return table.c[column_path]
    return literal_column(escape_identifier(column_path))


def build_order(
    order_fields: List[OrderField],
    table: Table,
    escape_identifier: Callable[[str], str],
) -> List[ColumnElement]:
    orders = []
    for column_name, direction in order_fields:
        if not column_name or not direction:
            continue
        order_col = resolve_column(table, column_name, escape_identifier)
        if direction == SortDirection.DESC:
            orders.append(order_col.desc())
        else:
            orders.append(order_col.asc())
    return orders


def tie_breaker(table: Table, id_column: Optional[str]) -> Optional[ColumnElement]:
    """Ascending identifier ordering, usable as a final deterministic sort key."""
    if id_column and id_column in table.c:
        return table.c[id_column].asc()
    return None
