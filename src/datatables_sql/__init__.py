# datatables_sql/__init__.py
from .config import DataTablesSettings, get_settings
from .core import DataTables
from .database import DatabaseBackend, SQLAlchemyBackend
from .dependencies import datatables_params, parse_bracket_params, register_error_handlers
from .enum import MatchMode, SortDirection
from .exceptions import ConfigurationError, DataTablesError, ValidationError
from .options import FieldSpec, QueryOptions, SearchJoin
from .ordering import parse_order
from .query import DataTablesQuery, build_query
from .schema import ColumnDef, DataTablesRequest, DataTablesResponse, OrderDef
from .search import build_condition, build_search_where
from .validation import ErrorCollector, FieldError, validate

__version__ = "0.2.0"

__all__ = [
    "DataTables",
    "DatabaseBackend",
    "SQLAlchemyBackend",
    "DataTablesRequest",
    "DataTablesResponse",
    "ColumnDef",
    "OrderDef",
    "QueryOptions",
    "FieldSpec",
    "SearchJoin",
    "DataTablesQuery",
    "DataTablesSettings",
    "get_settings",
    "DataTablesError",
    "ConfigurationError",
    "ValidationError",
    "ErrorCollector",
    "FieldError",
    "MatchMode",
    "SortDirection",
    "build_condition",
    "build_search_where",
    "build_query",
    "parse_order",
    "validate",
    "datatables_params",
    "parse_bracket_params",
    "register_error_handlers",
]
