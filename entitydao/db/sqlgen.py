"""
Builders turning entities and entity classes into ``DbSqlOperation`` values.

Every function returns a new immutable operation; nothing is executed here.
"""
from __future__ import annotations

from typing import Any

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, select
from sqlalchemy import insert as sa_insert
from sqlalchemy import update as sa_update

from .mapping import DbEntityDescriptor, lookup_type
from .models import DbOperationType, DbSqlOperation


def _operation(op_type: DbOperationType, ded: DbEntityDescriptor, statement) -> DbSqlOperation:
    return DbSqlOperation(
        op_type=op_type,
        entity_type=ded.entity_type,
        table=ded.table_name,
        statement=statement,
    )


def insert(entity: Any) -> DbSqlOperation:
    """INSERT of all mapped columns. A ``None`` id is left to the database."""
    ded = lookup_type(type(entity))
    values = ded.to_values(entity)
    if values[ded.id_column] is None:
        del values[ded.id_column]
    return _operation(DbOperationType.INSERT, ded, sa_insert(ded.table).values(**values))


def update_all(entity: Any) -> DbSqlOperation:
    """UPDATE of every non-id column, ``None`` values included."""
    ded = lookup_type(type(entity))
    values = ded.to_values(entity)
    id_value = values.pop(ded.id_column)
    stmt = sa_update(ded.table).where(ded.table.c[ded.id_column] == id_value).values(**values)
    return _operation(DbOperationType.UPDATE, ded, stmt)


def update_column(entity: Any, name: str, value: Any) -> DbSqlOperation:
    ded = lookup_type(type(entity))
    column = ded.column_for(name)
    stmt = (
        sa_update(ded.table)
        .where(ded.table.c[ded.id_column] == entity.entity_id)
        .values({column: value})
    )
    return _operation(DbOperationType.UPDATE, ded, stmt)


def find_by_id(entity_type: type, entity_id: Any) -> DbSqlOperation:
    ded = lookup_type(entity_type)
    stmt = select(ded.table).where(ded.table.c[ded.id_column] == entity_id)
    return _operation(DbOperationType.SELECT, ded, stmt)


def find_entity_by_id(entity: Any) -> DbSqlOperation:
    return find_by_id(type(entity), entity.entity_id)


def find_by_column(entity_type: type, name: str, value: Any) -> DbSqlOperation:
    """SELECT by single column equality; ``None`` renders as ``IS NULL``."""
    ded = lookup_type(entity_type)
    column = ded.column_for(name)
    stmt = select(ded.table).where(ded.table.c[column] == value)
    return _operation(DbOperationType.SELECT, ded, stmt)


def find(criteria: Any) -> DbSqlOperation:
    """
    SELECT matching every non-``None`` property of ``criteria``.

    A criteria entity with no populated property selects all rows.
    """
    ded = lookup_type(type(criteria))
    conditions = [
        ded.table.c[column] == value
        for column, value in ded.to_values(criteria).items()
        if value is not None
    ]
    stmt = select(ded.table)
    if conditions:
        stmt = stmt.where(*conditions)
    return _operation(DbOperationType.SELECT, ded, stmt)


def delete_by_id(entity_type: type, entity_id: Any) -> DbSqlOperation:
    ded = lookup_type(entity_type)
    stmt = sa_delete(ded.table).where(ded.table.c[ded.id_column] == entity_id)
    return _operation(DbOperationType.DELETE, ded, stmt)


def delete(entity: Any) -> DbSqlOperation:
    return delete_by_id(type(entity), entity.entity_id)


def count(entity_type: type) -> DbSqlOperation:
    ded = lookup_type(entity_type)
    stmt = select(func.count()).select_from(ded.table)
    return _operation(DbOperationType.COUNT, ded, stmt)


def find_foreign(target_type: type, source: Any) -> DbSqlOperation:
    """
    SELECT rows of ``target_type`` referencing ``source``.

    The referencing column is the source's foreign key column, e.g. a
    ``Post`` row references a ``User`` through ``post.user_id``.

    Raises:
        MappingError: If ``target_type`` does not map that column
    """
    source_ded = lookup_type(type(source))
    target_ded = lookup_type(target_type)
    column = target_ded.column_for(source_ded.foreign_key_column)
    stmt = select(target_ded.table).where(target_ded.table.c[column] == source.entity_id)
    return _operation(DbOperationType.SELECT, target_ded, stmt)


def find_all(entity_type: type) -> DbSqlOperation:
    ded = lookup_type(entity_type)
    return _operation(DbOperationType.SELECT, ded, select(ded.table))


def max_id(entity_type: type) -> DbSqlOperation:
    ded = lookup_type(entity_type)
    stmt = select(func.max(ded.table.c[ded.id_column]))
    return _operation(DbOperationType.COUNT, ded, stmt)
