"""
Static per-endpoint configuration.

Everything here is written by the application developer, never by the
client, so SQL fragments in ``where`` and join ``onclause`` strings are
trusted. Client input only ever reaches SQL as bound parameters.
"""

from typing import Any, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import text
from sqlalchemy.sql.elements import ClauseElement

from .exceptions import ConfigurationError


class FieldSpec(BaseModel):
    """
    A searchable field.

    Attributes:
        name: Column name; may be qualified with a joined table ("roles.name")
        prefix_length: When set, only values starting with the first
            ``prefix_length`` characters of the search string match
    """

    model_config = ConfigDict(frozen=True)

    name: str
    prefix_length: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            raise ValueError("field name must not be empty")
        return v

    @field_validator("prefix_length")
    @classmethod
    def validate_prefix_length(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("prefix_length must be a positive integer")
        return v


class SearchJoin(BaseModel):
    """A join added to both statements only while a search is active."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    target: Any
    onclause: Any = None
    isouter: bool = True

    def clause(self) -> Optional[ClauseElement]:
        if isinstance(self.onclause, str):
            return text(self.onclause)
        return self.onclause


class QueryOptions(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    where: List[Any] = Field(default_factory=list)
    search_fields: List[FieldSpec] = Field(default_factory=list)
    search_joins: List[SearchJoin] = Field(default_factory=list)
    order_fields: List[str] = Field(default_factory=list)
    preload: List[Any] = Field(default_factory=list)
    schema_: Optional[Type[BaseModel]] = Field(default=None, alias="schema")
    id_column: Optional[str] = None
    # Append "<id> ASC" after explicit orderings so ties page deterministically.
    tie_break: bool = False

    @field_validator("search_fields", mode="before")
    @classmethod
    def normalize_search_fields(cls, v: Any) -> Any:
        if v is None:
            return []
        return [FieldSpec(name=field) if isinstance(field, str) else field for field in v]

    @field_validator("search_joins", mode="before")
    @classmethod
    def normalize_search_joins(cls, v: Any) -> Any:
        if v is None:
            return []
        joins = []
        for join in v:
            if isinstance(join, tuple):
                target, onclause = join
                join = SearchJoin(target=target, onclause=onclause)
            joins.append(join)
        return joins

    @field_validator("where", "order_fields", "preload", mode="before")
    @classmethod
    def normalize_lists(cls, v: Any) -> Any:
        return [] if v is None else list(v)

    def where_clauses(self) -> List[ClauseElement]:
        """Static predicates, with plain strings wrapped as parenthesised SQL."""
        clauses = []
        for where in self.where:
            if isinstance(where, str):
                clauses.append(text(f"({where})"))
            else:
                clauses.append(where)
        return clauses


def build_options(
    options: Union[QueryOptions, dict, None] = None, **kwargs: Any
) -> QueryOptions:
    """
    Coerce a dict (or keyword arguments) into QueryOptions.

    Raises:
        ConfigurationError: If the configuration does not validate
    """
    if isinstance(options, QueryOptions):
        if not kwargs:
            return options
        values = {
            info.alias or name: getattr(options, name)
            for name, info in QueryOptions.model_fields.items()
        }
    else:
        values = dict(options or {})
    values.update(kwargs)
    try:
        return QueryOptions.model_validate(values)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid query options: {exc}") from exc
