"""
FastAPI integration.

DataTables sends GET requests in jQuery's bracket notation
(``columns[0][data]=name&order[0][column]=0``). ``datatables_params``
rebuilds the nested structure that ``DataTables.process`` expects.
POST endpoints can take the JSON body as a plain dict instead.
"""

import re
from typing import Any, Dict, Iterable, List, Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .exceptions import ValidationError

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_PART_RE = re.compile(r"\[([^\[\]]*)\]")


def _split_key(key: str) -> List[str]:
    match = _KEY_RE.match(key)
    if not match:
        return [key]
    return [match.group(1)] + _PART_RE.findall(match.group(2))


def parse_bracket_params(items: Iterable[Tuple[str, str]]) -> Dict[str, Any]:
    """
    Parse ``(key, value)`` pairs using bracket notation into nested dicts.

    ``a[b][c]=1`` becomes ``{"a": {"b": {"c": "1"}}}``; a trailing ``[]``
    collects repeated values into a list. Index keys stay strings, so
    ``columns`` and ``order`` come out as string-keyed maps.
    """
    params: Dict[str, Any] = {}
    for key, value in items:
        parts = _split_key(key)
        append = len(parts) > 1 and parts[-1] == ""
        if append:
            parts = parts[:-1]

        node = params
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child

        last = parts[-1]
        if append:
            existing = node.get(last)
            if not isinstance(existing, list):
                existing = []
                node[last] = existing
            existing.append(value)
        else:
            node[last] = value
    return params


async def datatables_params(request: Request) -> Dict[str, Any]:
    """FastAPI dependency returning the request's query string as nested params."""
    return parse_bracket_params(request.query_params.multi_items())


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors:
        errors.append(
            {
                "code": "INVALID_INPUT",
                "field": error.field,
                "message": error.message,
                "full_message": f"{error.label} {error.message}",
            }
        )
    return JSONResponse(
        status_code=422,
        content={"errors": errors},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
