from __future__ import annotations

import logging
from typing import Any, Optional, Type, TypeVar

from .config import DaoConfig
from .db import sqlgen
from .db.idgen import DbIdGenerator
from .db.mapping import lookup_type
from .db.query import DbQueryFactory
from .entity import Entity

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)


class AppDao:
    """
    Generic DAO over any mapped ``Entity``.

    Every method builds one statement with ``sqlgen`` and runs it through a
    fresh ``DbQuery``; nothing is cached between calls. Errors raised by
    SQLAlchemy or the id generator propagate unchanged.

    Usage:
        dao = AppDao(DbQueryFactory(engine))
        user = dao.store(User(name="a"))
        assert dao.find_by_id(User, user.id) == user
    """

    def __init__(
        self,
        query_factory: DbQueryFactory,
        id_generator: Optional[DbIdGenerator] = None,
        config: Optional[DaoConfig] = None,
    ) -> None:
        self.query_factory = query_factory
        self.id_generator = id_generator or DbIdGenerator(query_factory)
        self.generated_keys = (config or DaoConfig()).generated_keys

    # ---------------------------------------------------------------- config

    @property
    def generated_keys(self) -> bool:
        """True if ids are assigned by the database on insert."""
        return self._generated_keys

    @generated_keys.setter
    def generated_keys(self, generated_keys: bool) -> None:
        self._generated_keys = generated_keys
        if generated_keys:
            logger.debug("IDs are incremented in database")
        else:
            logger.debug("IDs are generated by %s", type(self.id_generator).__name__)

    # ---------------------------------------------------------------- store

    def store(self, entity: E) -> E:
        """
        Inserts a transient entity or updates a persistent one.
        The inserted entity gets its id assigned.
        """
        if entity.is_persistent():
            self.query_factory.query(sqlgen.update_all(entity)).execute_update_and_close()
            return entity

        if self.generated_keys:
            with self.query_factory.query(sqlgen.insert(entity)) as q:
                q.set_generated_key()
                q.execute_update()
                entity.entity_id = q.get_generated_key()
        else:
            entity.entity_id = self.id_generator.next_id(entity)
            with self.query_factory.query(sqlgen.insert(entity)) as q:
                q.execute_update()
        return entity

    def save(self, entity: Entity) -> None:
        """Simply inserts the entity, whatever its id."""
        self.query_factory.query(sqlgen.insert(entity)).execute_update_and_close()

    # ---------------------------------------------------------------- update

    def update_property(self, entity: Entity, name: str, value: Any) -> None:
        """
        Updates a single column of the entity's row.

        ``name`` may be a property or a column name. The passed ``entity`` is
        modified in memory too: its property is set to ``value`` after the
        UPDATE succeeds.
        """
        self.query_factory.query(sqlgen.update_column(entity, name, value)).execute_update_and_close()
        setattr(entity, lookup_type(type(entity)).property_for(name), value)

    # ---------------------------------------------------------------- find

    def find_by_id(self, entity_or_type: Any, entity_id: Any = None) -> Any:
        """
        Finds a single entity by its id.

        Called either as ``find_by_id(User, 1)`` or ``find_by_id(user)``.
        A ``None`` entity yields ``None`` without querying.
        """
        if entity_or_type is None:
            return None
        if isinstance(entity_or_type, type):
            op = sqlgen.find_by_id(entity_or_type, entity_id)
        else:
            op = sqlgen.find_entity_by_id(entity_or_type)
        return self.query_factory.query(op).find_one_and_close()

    def find_one_by_property(self, entity_type: Type[E], name: str, value: Any) -> Optional[E]:
        return self.query_factory.query(
            sqlgen.find_by_column(entity_type, name, value)
        ).find_one_and_close()

    def find_one(self, criteria: E) -> Optional[E]:
        """Finds one entity matching the populated fields of ``criteria``."""
        return self.query_factory.query(sqlgen.find(criteria)).find_one_and_close()

    def find(self, criteria: E) -> list[E]:
        """Finds all entities matching the populated fields of ``criteria``."""
        return self.query_factory.query(sqlgen.find(criteria)).list_and_close()

    # ---------------------------------------------------------------- delete

    def delete_by_id(self, entity_or_type: Any, entity_id: Any = None) -> None:
        """
        Deletes a single entity by its id.

        ``delete_by_id(User, 1)`` always issues the DELETE, whether or not
        the row exists. ``delete_by_id(user)`` does nothing for a ``None``
        or transient entity.
        """
        if isinstance(entity_or_type, type):
            op = sqlgen.delete_by_id(entity_or_type, entity_id)
        elif entity_or_type is not None and entity_or_type.is_persistent():
            op = sqlgen.delete(entity_or_type)
        else:
            return
        self.query_factory.query(op).execute_update_and_close()

    # ---------------------------------------------------------------- count

    def count(self, entity_type: type) -> int:
        return self.query_factory.query(sqlgen.count(entity_type)).execute_count_and_close()

    # ---------------------------------------------------------------- related

    def find_related(self, target_type: Type[E], source: Entity) -> list[E]:
        """Finds ``target_type`` entities referencing ``source`` by foreign key."""
        return self.query_factory.query(sqlgen.find_foreign(target_type, source)).list_and_close()

    # ---------------------------------------------------------------- list

    def list(self, entity_type: Type[E]) -> list[E]:
        """Lists all entities of the type."""
        return self.query_factory.query(sqlgen.find_all(entity_type)).list_and_close()
