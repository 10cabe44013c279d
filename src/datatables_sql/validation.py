"""
Validation of raw DataTables request parameters.

Parameters arrive loosely typed (query-string values are all strings) and
nested (``order[0][column]``). Every problem is collected as a field-keyed
error so the caller can reject the request before any SQL is built.
"""

from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from .config import DataTablesSettings, get_settings
from .options import QueryOptions
from .utils import as_index_map, is_number, to_int, to_number

Rule = Tuple[Callable[[Any], bool], str]


class FieldError(BaseModel):
    """
    A single validation failure.

    Attributes:
        field: Top-level parameter the error belongs to ("order", "columns", ...)
        label: Full path of the offending value ("order[0][dir]")
        message: Human-readable message, already passed through translation
    """

    field: str
    label: str
    message: str

    def as_dict(self) -> Dict[str, str]:
        return {"field": self.field, "label": self.label, "message": self.message}


class ErrorCollector:
    """Accumulates FieldErrors; rules run in order and stop at the first failure."""

    def __init__(self, translate: Optional[Callable[[str], str]] = None):
        self.translate = translate or (lambda message: message)
        self.errors: List[FieldError] = []

    def add(self, field: str, label: str, message: str) -> None:
        self.errors.append(
            FieldError(field=field, label=label, message=self.translate(message))
        )

    def check(
        self,
        values: Mapping[str, Any],
        key: str,
        label: str,
        rules: Sequence[Rule],
        field: Optional[str] = None,
    ) -> bool:
        value = values.get(key)
        for predicate, message in rules:
            if not predicate(value):
                self.add(field or key, label, message)
                return False
        return True

    def __iter__(self) -> Iterator[FieldError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __bool__(self) -> bool:
        return bool(self.errors)

    def as_dicts(self) -> List[Dict[str, str]]:
        return [error.as_dict() for error in self.errors]


def _absent(value: Any) -> bool:
    return value is None or value == ""


def optional(predicate: Callable[[Any], bool]) -> Callable[[Any], bool]:
    return lambda value: _absent(value) or predicate(value)


def is_map(value: Any) -> bool:
    return as_index_map(value) is not None


def is_integer(value: Any) -> bool:
    return isinstance(to_number(value), int)


def validate(
    params: Mapping[str, Any],
    options: QueryOptions,
    settings: Optional[DataTablesSettings] = None,
    translate: Optional[Callable[[str], str]] = None,
) -> List[FieldError]:
    """
    Validate raw request parameters against the endpoint configuration.

    Args:
        params: Raw, nested request parameters
        options: Endpoint configuration; ``order_fields`` is the sort whitelist
        settings: Settings providing MAX_LENGTH
        translate: Message localisation hook

    Returns:
        List of FieldErrors; empty when the request is valid
    """
    settings = settings or get_settings()
    errors = ErrorCollector(translate)

    if not isinstance(params, Mapping):
        errors.add("params", "params", "is not an object")
        return errors.errors

    length_rules: List[Rule] = [
        (optional(is_number), "is not a number"),
        (optional(is_integer), "is not an integer"),
        (optional(lambda v: to_int(v) >= -1), "must be -1 or greater than or equal to 0"),
    ]
    if settings.MAX_LENGTH is not None:
        length_rules.append(
            (
                optional(lambda v: 0 <= to_int(v) <= settings.MAX_LENGTH),
                f"must be less than or equal to {settings.MAX_LENGTH}",
            )
        )
    errors.check(params, "length", "length", length_rules)
    errors.check(params, "start", "start", [
        (optional(is_number), "is not a number"),
        (optional(is_integer), "is not an integer"),
        (optional(lambda v: to_int(v) >= 0), "must be greater than or equal to 0"),
    ])
    errors.check(params, "draw", "draw", [
        (optional(is_number), "is not a number"),
    ])
    errors.check(params, "columns", "columns", [
        (optional(is_map), "is not an object"),
    ])
    errors.check(params, "order", "order", [
        (optional(is_map), "is not an object"),
    ])
    errors.check(params, "search", "search", [
        (optional(lambda v: isinstance(v, Mapping)), "is not an object"),
    ])
    search = params.get("search")
    if isinstance(search, Mapping):
        errors.check(search, "value", "search[value]", [
            (lambda v: v is None or isinstance(v, str), "is not a string"),
        ], field="search")

    columns: Dict[int, Any] = {}
    for key, column in (as_index_map(params.get("columns")) or {}).items():
        index = to_int(key)
        if index is None:
            errors.add("columns", f"columns[{key}]", "is not a number")
        elif index in columns:
            errors.add("columns", f"columns[{key}]", "is a duplicate index")
        elif not isinstance(column, Mapping):
            errors.add("columns", f"columns[{key}]", "is not an object")
        else:
            columns[index] = column

    # Built fresh per call: the whitelist belongs to this endpoint's options.
    order_fields = set(options.order_fields)
    column_indexes = set(columns)

    order_indexes = set()
    for key, order in (as_index_map(params.get("order")) or {}).items():
        index = to_int(key)
        if index is None:
            errors.add("order", f"order[{key}]", "is not a number")
            continue
        if index in order_indexes:
            errors.add("order", f"order[{key}]", "is a duplicate index")
            continue
        order_indexes.add(index)
        if not isinstance(order, Mapping):
            errors.add("order", f"order[{key}]", "is not an object")
            continue

        errors.check(order, "column", f"order[{key}][column]", [
            (optional(is_integer), "is not a number"),
            (optional(lambda v: to_int(v) in column_indexes), "is not a valid column index"),
        ], field="order")
        errors.check(order, "dir", f"order[{key}][dir]", [
            (optional(lambda v: isinstance(v, str) and v.lower() in ("asc", "desc")),
             "must be 'asc' or 'desc'"),
        ], field="order")

        column_index = to_int(order.get("column"))
        if column_index is not None:
            errors.check(columns.get(column_index, {}), "data", f"columns[{column_index}][data]", [
                (lambda v: isinstance(v, str) and v in order_fields, "is not a valid orderable column name"),
            ], field="columns")

    return errors.errors
