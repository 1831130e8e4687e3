from . import sqlgen
from .idgen import DbIdGenerator
from .mapping import DbEntityDescriptor, lookup_type
from .models import DbOperationType, DbSqlOperation
from .query import DbQuery, DbQueryFactory
from .session import DbSession

__all__ = [
    "DbSession",
    "DbQuery",
    "DbQueryFactory",
    "DbIdGenerator",
    "DbEntityDescriptor",
    "DbOperationType",
    "DbSqlOperation",
    "lookup_type",
    "sqlgen",
]
