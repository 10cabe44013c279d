import logging
from typing import Any, Callable, Mapping, Optional, Type, Union

from sqlalchemy import Table
from sqlalchemy.ext.asyncio import AsyncSession

from .config import DataTablesSettings, get_settings
from .database import DatabaseBackend, SQLAlchemyBackend
from .exceptions import ConfigurationError, ValidationError
from .options import QueryOptions, build_options
from .query import DataTablesQuery, build_query, get_table
from .schema import DataTablesRequest, DataTablesResponse
from .utils import to_json_number, to_number
from .validation import validate

_logger = logging.getLogger(__name__)


class DataTables:
    def __init__(
        self,
        db_session: Optional[AsyncSession],
        model: Union[Type, Table],
        options: Union[QueryOptions, dict, None] = None,
        db_backend: Optional[DatabaseBackend] = None,
        settings: Optional[DataTablesSettings] = None,
        logger: Optional[logging.Logger] = None,
        translate: Optional[Callable[[str], str]] = None,
    ):
        """
        Initializes the DataTables processor.

        Args:
            db_session: SQLAlchemy AsyncSession; unused when db_backend is given
            model: Mapped model class or Core Table to page over
            options: Per-endpoint QueryOptions (or a dict of them)
            db_backend: Store client; defaults to SQLAlchemyBackend(db_session)
            settings: Overrides the environment-derived settings
            logger: Receives non-fatal faults and, with LOG_SQL, statements
            translate: Localises validation messages
        """
        self.model = model
        self.table = get_table(model)
        self.options = build_options(options)
        self.settings = settings or get_settings()
        self.logger = logger or _logger
        self.translate = translate
        self.id_column = self.options.id_column or self.settings.ID_COLUMN

        if self.id_column not in self.table.c:
            raise ConfigurationError(
                f"Table {self.table.name!r} has no {self.id_column!r} column"
            )
        if self.options.preload and isinstance(model, Table):
            raise ConfigurationError("preload requires a mapped model, not a Table")

        if db_backend is None:
            if db_session is None:
                raise ConfigurationError("Either db_session or db_backend is required")
            self.db_backend = SQLAlchemyBackend(db_session)
        else:
            self.db_backend = db_backend

    def get_query(self, request_data: DataTablesRequest) -> DataTablesQuery:
        return build_query(
            self.model,
            request_data,
            self.options,
            self.db_backend.escape_identifier,
            id_column=self.id_column,
            log=self.logger,
        )

    def serialize(self, record: Any) -> Any:
        """Map one record to its public JSON representation."""
        if self.options.schema_ is not None:
            return self.options.schema_.model_validate(
                record, from_attributes=True
            ).model_dump(mode="json")
        if hasattr(record, "as_public_json"):
            return record.as_public_json()
        if hasattr(record, "_mapping"):
            return dict(record._mapping)
        raise ConfigurationError(
            f"Cannot serialize {type(record).__name__}: configure a schema or "
            "define as_public_json()"
        )

    async def process(self, params: Mapping[str, Any]) -> DataTablesResponse:
        """
        Processes the DataTables request and returns the response.

        Raises:
            ValidationError: If the parameters are invalid; nothing is executed
        """
        errors = validate(params, self.options, settings=self.settings, translate=self.translate)
        if errors:
            raise ValidationError(errors)

        request_data = DataTablesRequest.from_params(params)
        query = self.get_query(request_data)

        if self.settings.LOG_SQL:
            self.logger.debug("DataTables count statement: %s", query.count)
            self.logger.debug("DataTables page statement: %s", query.page)

        # recordsTotal and recordsFiltered both come from the filtered count.
        total_count = await self.db_backend.count(query.count)

        records = await self.db_backend.fetch(
            query.page, preload=self.options.preload, scalars=query.scalars
        )

        draw = to_number(params.get("draw"))
        return DataTablesResponse(
            draw=int(draw) if draw is not None else 0,
            recordsTotal=to_json_number(total_count),
            recordsFiltered=to_json_number(total_count),
            data=[self.serialize(record) for record in records],
        )
