from enum import Enum


class MatchMode(str, Enum):
    CONTAINS = "contains"
    EQUALS = "equals"
    STARTS_WITH = "startsWith"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @classmethod
    def parse(cls, value) -> "SortDirection":
        """Anything other than a case-insensitive "desc" sorts ascending."""
        if isinstance(value, str) and value.lower() == "desc":
            return cls.DESC
        return cls.ASC
