from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from functools import lru_cache
from types import UnionType
from typing import Any, Mapping, Union, get_args, get_origin, get_type_hints

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    MetaData,
    Numeric,
    String,
    Table,
)

from ..entity import Entity
from ..errors import MappingError
from .helpers import _validate_identifier, to_snake_case

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DbEntityDescriptor:
    """
    Table metadata derived from an entity class.

    ``properties`` maps attribute names to column names, in field order.
    """
    entity_type: type
    entity_name: str
    table_name: str
    id_property: str
    id_column: str
    properties: Mapping[str, str]
    foreign_key_column: str
    table: Table

    @property
    def columns(self) -> list[str]:
        return list(self.properties.values())

    def column_for(self, name: str) -> str:
        """
        Resolve a property name (or a column name) to its column.

        Raises:
            MappingError: If nothing with that name is mapped
        """
        if name in self.properties:
            return self.properties[name]
        if name in self.properties.values():
            return name
        raise MappingError(f"{self.entity_type.__name__} has no mapped property or column {name!r}")

    def property_for(self, name: str) -> str:
        """Resolve a column name (or a property name) to its property."""
        column = self.column_for(name)
        if name in self.properties:
            return name
        return next(prop for prop, col in self.properties.items() if col == column)

    def to_values(self, entity: Any) -> dict[str, Any]:
        """Return column -> value for every mapped property of ``entity``."""
        return {column: getattr(entity, prop) for prop, column in self.properties.items()}

    def from_row(self, row: Mapping[str, Any]) -> Any:
        """Build an entity instance from a column -> value row. Unmapped columns are ignored."""
        kwargs = {prop: row[column] for prop, column in self.properties.items() if column in row}
        return self.entity_type(**kwargs)


_COLUMN_TYPES: dict[Any, Any] = {
    int: BigInteger,
    str: String,
    bool: Boolean,
    float: Float,
    datetime: DateTime,
    date: Date,
    Decimal: Numeric,
}


def _column_type(annotation: Any) -> Any:
    """
    SQLAlchemy type for a field annotation; ``Optional[X]`` maps like ``X``.
    Unknown annotations map to None (untyped column).
    """
    if get_origin(annotation) in (Union, UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) != 1:
            return None
        annotation = args[0]
    return _COLUMN_TYPES.get(annotation)


def _resolve_hints(entity_type: type) -> dict[str, Any]:
    try:
        return get_type_hints(entity_type)
    except (NameError, TypeError) as exc:
        raise MappingError(
            f"Cannot resolve field annotations of {entity_type.__name__}: {exc}"
        ) from exc


def lookup_type(entity_type: type) -> DbEntityDescriptor:
    """
    Return the descriptor for an entity class.

    Raises:
        MappingError: If the class is not a dataclass ``Entity`` or its
            metadata is invalid
    """
    if not isinstance(entity_type, type):
        raise MappingError(f"Expected an entity class, got {type(entity_type).__name__}")
    return _lookup_type(entity_type)


@lru_cache(maxsize=None)
def _lookup_type(entity_type: type) -> DbEntityDescriptor:
    if not issubclass(entity_type, Entity):
        raise MappingError(f"{entity_type.__name__} is not an Entity")
    if not dataclasses.is_dataclass(entity_type):
        raise MappingError(f"{entity_type.__name__} must be a dataclass")

    entity_name = to_snake_case(entity_type.__name__)
    table_name = _validate_identifier(
        getattr(entity_type, "__tablename__", None) or entity_name, "table"
    )

    hints = _resolve_hints(entity_type)
    properties: dict[str, str] = {}
    column_types: dict[str, Any] = {}
    for field in dataclasses.fields(entity_type):
        column = _validate_identifier(field.metadata.get("column", field.name), "column")
        properties[field.name] = column
        column_types[column] = field.metadata.get("type") or _column_type(hints.get(field.name))

    id_property = entity_type.__id_property__
    if id_property not in properties:
        raise MappingError(
            f"{entity_type.__name__} has no field for its id property {id_property!r}"
        )
    id_column = properties[id_property]

    foreign_key_column = _validate_identifier(
        getattr(entity_type, "__foreign_key__", None) or f"{entity_name}_{id_column}",
        "foreign key column",
    )

    columns = [
        Column(column, BigInteger, primary_key=True, autoincrement=True)
        if column == id_column
        else Column(column, column_types[column])
        for column in properties.values()
    ]
    table = Table(table_name, MetaData(), *columns)

    logger.debug(
        "Mapped %s to table %s (id column %s)", entity_type.__name__, table_name, id_column
    )
    return DbEntityDescriptor(
        entity_type=entity_type,
        entity_name=entity_name,
        table_name=table_name,
        id_property=id_property,
        id_column=id_column,
        properties=properties,
        foreign_key_column=foreign_key_column,
        table=table,
    )
