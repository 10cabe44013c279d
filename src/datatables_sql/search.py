import logging
import re
from typing import Callable, List, Optional, Sequence

from sqlalchemy import Table, Text, cast, false, func, or_
from sqlalchemy.sql.elements import ColumnElement

from .enum import MatchMode
from .options import FieldSpec
from .ordering import resolve_column
from .utils import escape_like

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE
)

LIKE_ESCAPE = "\\"


def build_condition(column_attr, match_mode: MatchMode, value: str) -> ColumnElement:
    """
    Build a case-insensitive filter condition on the text form of a column.

    The value is bound as a parameter. For the LIKE-based modes it is escaped
    first, so ``%`` and ``_`` supplied by the user match literally.
    """
    column_text = cast(column_attr, Text)

    if match_mode == MatchMode.EQUALS:
        return func.lower(column_text) == value.lower()
    elif match_mode == MatchMode.STARTS_WITH:
        return column_text.ilike(f"{escape_like(value, LIKE_ESCAPE)}%", escape=LIKE_ESCAPE)
    elif match_mode == MatchMode.CONTAINS:
        return column_text.ilike(f"%{escape_like(value, LIKE_ESCAPE)}%", escape=LIKE_ESCAPE)

    raise ValueError(f"Unsupported match mode: {match_mode}")


def match_uuid(search_value: str, pattern=UUID_PATTERN, log: Optional[logging.Logger] = None) -> bool:
    """
    Return True if the search value looks like a UUID.

    A failure inside the regex engine is logged and treated as no match.
    """
    try:
        return pattern.fullmatch(search_value) is not None
    except (re.error, TypeError) as exc:
        (log or logger).error("regex error: %s", exc)
        return False


def build_search_where(
    table: Table,
    search_fields: Sequence[FieldSpec],
    search_value: str,
    escape_identifier: Callable[[str], str],
    id_column: str = "id",
    log: Optional[logging.Logger] = None,
    uuid_pattern=UUID_PATTERN,
) -> ColumnElement:
    """
    Build the OR-ed search predicate for a global search value.

    Args:
        table: Base table being searched
        search_fields: Configured searchable fields
        search_value: Raw search string from the client
        escape_identifier: Identifier quoting for names outside the base table
        id_column: Identifier column; only ever matched exactly, as a UUID
        log: Logger receiving regex engine failures
        uuid_pattern: Compiled pattern deciding the identifier fast path

    Returns:
        A single predicate; ``false()`` when nothing could match
    """
    where: List[ColumnElement] = []

    # The identifier is only searched for exact, case-insensitive matches.
    if id_column in table.c and match_uuid(search_value, uuid_pattern, log):
        where.append(build_condition(table.c[id_column], MatchMode.EQUALS, search_value))

    for field in search_fields:
        if field.name == id_column:
            continue

        column_attr = resolve_column(table, field.name, escape_identifier)
        if field.prefix_length:
            where.append(
                build_condition(
                    column_attr, MatchMode.STARTS_WITH, search_value[: field.prefix_length]
                )
            )
        else:
            where.append(build_condition(column_attr, MatchMode.CONTAINS, search_value))

    if not where:
        return false()
    return or_(*where)
