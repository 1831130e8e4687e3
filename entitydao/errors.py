class EntityDaoError(Exception):
    """Base exception for entitydao errors."""


class MappingError(EntityDaoError):
    """Entity class or property cannot be mapped to a table or column."""
