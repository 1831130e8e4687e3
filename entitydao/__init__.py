from .dao import AppDao
from .entity import Entity, IdEntity
from .db.idgen import DbIdGenerator
from .db.query import DbQuery, DbQueryFactory

__all__ = ["AppDao", "Entity", "IdEntity", "DbIdGenerator", "DbQuery", "DbQueryFactory"]
