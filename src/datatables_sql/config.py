"""
Settings for the DataTables query layer.

Values are read from the environment with the ``DATATABLES_`` prefix, e.g.
``DATATABLES_MAX_LENGTH=500``.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataTablesSettings(BaseSettings):
    """
    Attributes:
        MAX_LENGTH: Largest page size a client may request; None disables the cap
        ID_COLUMN: Identifier column used for COUNT(DISTINCT ...) and UUID lookups
        LOG_LEVEL: Level used by setup_logger
        LOG_SQL: Log the generated count and page statements at DEBUG level
    """

    model_config = SettingsConfigDict(env_prefix="DATATABLES_", extra="ignore")

    MAX_LENGTH: Optional[int] = Field(
        default=None, description="Upper bound for the 'length' parameter"
    )
    ID_COLUMN: str = Field(default="id", description="Identifier column name")
    LOG_LEVEL: str = Field(default="INFO")
    LOG_SQL: bool = Field(default=False)

    @field_validator("MAX_LENGTH")
    @classmethod
    def validate_max_length(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("MAX_LENGTH must be a positive integer")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(allowed))}")
        return v.upper()


@lru_cache()
def get_settings() -> DataTablesSettings:
    return DataTablesSettings()
