# datatables_sql/schema.py
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils import as_index_map, to_int

T = TypeVar("T")


class ColumnDef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: Optional[str] = None

    @field_validator("data", mode="before")
    @classmethod
    def coerce_data(cls, v: Any) -> Optional[str]:
        # DataTables allows integer data sources for array-backed tables.
        if v is None or isinstance(v, str):
            return v
        return str(v)


class OrderDef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    column: Optional[int] = None
    dir: str = "asc"


class DataTablesRequest(BaseModel):
    """
    Typed view of an already validated DataTables request.

    ``columns`` and ``order`` are keyed by integer index. Consumers must sort
    the keys themselves; dict order here reflects the client, not the index.
    """

    draw: Optional[int] = None
    start: Optional[int] = None
    length: Optional[int] = None
    search_value: Optional[str] = None
    columns: Dict[int, ColumnDef] = Field(default_factory=dict)
    order: Dict[int, OrderDef] = Field(default_factory=dict)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "DataTablesRequest":
        columns = {}
        for key, value in (as_index_map(params.get("columns")) or {}).items():
            index = to_int(key)
            if index is not None and isinstance(value, Mapping):
                columns[index] = ColumnDef.model_validate(dict(value))

        order = {}
        for key, value in (as_index_map(params.get("order")) or {}).items():
            index = to_int(key)
            if index is not None and isinstance(value, Mapping):
                order[index] = OrderDef(
                    column=to_int(value.get("column")),
                    dir=value.get("dir") or "asc",
                )

        search_value = None
        search = params.get("search")
        if isinstance(search, Mapping) and isinstance(search.get("value"), str):
            search_value = search["value"]

        return cls(
            draw=to_int(params.get("draw")),
            start=to_int(params.get("start")),
            length=to_int(params.get("length")),
            search_value=search_value,
            columns=columns,
            order=order,
        )


class DataTablesResponse(BaseModel, Generic[T]):
    draw: int = 0
    recordsTotal: Union[int, str] = 0
    recordsFiltered: Union[int, str] = 0
    # Always a list: an empty page still serializes as "data": [].
    data: List[T] = Field(default_factory=list)
