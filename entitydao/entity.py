from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional


class Entity:
    """
    Mixin for persistent entities.

    Concrete entities are dataclasses. The identity attribute is named by
    ``__id_property__`` and the table by ``__tablename__`` (defaults to the
    snake_case class name).

    An entity is persistent when its identity is set; the DAO decides between
    INSERT and UPDATE from this state alone.
    """

    __id_property__: ClassVar[str] = "id"

    @property
    def entity_id(self) -> Any:
        return getattr(self, self.__id_property__, None)

    @entity_id.setter
    def entity_id(self, value: Any) -> None:
        setattr(self, self.__id_property__, value)

    def is_persistent(self) -> bool:
        return self.entity_id is not None


@dataclass
class IdEntity(Entity):
    """
    Entity with a numeric ``id`` column.

    Subclass fields must declare defaults, since ``id`` already has one:

        @dataclass
        class User(IdEntity):
            __tablename__ = "users"

            name: Optional[str] = None
    """

    id: Optional[int] = None
