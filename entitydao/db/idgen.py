from __future__ import annotations

import logging
import threading
from typing import Any

from . import sqlgen
from .mapping import lookup_type
from .query import DbQueryFactory

logger = logging.getLogger(__name__)


class DbIdGenerator:
    """
    Hands out entity ids when the database does not generate them.

    Counters are kept per table, so entity classes mapped to the same table
    share one sequence. The first call for a table reads ``MAX(id)`` from it
    (0 for an empty table); later calls increment an in-memory counter.
    Ids are only unique as long as this generator is the sole writer of new
    rows for the table.
    """

    def __init__(self, query_factory: DbQueryFactory) -> None:
        self.query_factory = query_factory
        self._last_ids: dict[str, int] = {}
        self._lock = threading.Lock()

    def next_id(self, entity: Any) -> int:
        entity_type = type(entity)
        table_name = lookup_type(entity_type).table_name
        with self._lock:
            last_id = self._last_ids.get(table_name)
            if last_id is None:
                last_id = self.query_factory.query(sqlgen.max_id(entity_type)).execute_count_and_close()
                logger.debug("Seeded id counter for %s at %d", table_name, last_id)
            last_id += 1
            self._last_ids[table_name] = last_id
            return last_id

    def reset(self, entity_type: type | None = None) -> None:
        """Forget the counter of the table ``entity_type`` maps to, or all counters."""
        with self._lock:
            if entity_type is None:
                self._last_ids.clear()
            else:
                self._last_ids.pop(lookup_type(entity_type).table_name, None)
