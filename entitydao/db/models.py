from dataclasses import dataclass
from enum import Enum

from sqlalchemy.sql import Executable


class DbOperationType(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    SELECT = "select"
    DELETE = "delete"
    COUNT = "count"


@dataclass(frozen=True)
class DbSqlOperation:
    """
    A single SQL statement built from entity metadata.
    """
    op_type: DbOperationType
    entity_type: type  # type rows are mapped to; also the metrics label source
    table: str
    statement: Executable
