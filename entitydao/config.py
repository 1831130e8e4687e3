from __future__ import annotations

import os
from dataclasses import dataclass

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class DaoConfig:
    # True: ids are assigned by the database on insert.
    # False: ids come from DbIdGenerator before insert.
    generated_keys: bool = True


@dataclass
class DbConfig:
    url: str
    echo: bool = False
    pool_pre_ping: bool = True

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not self.url:
            raise ValueError("url must be a non-empty SQLAlchemy database URL")

    @classmethod
    def from_env(cls, prefix: str = "ENTITYDAO_") -> "DbConfig":
        """
        Build a config from environment variables.

        Reads ``{prefix}DB_URL`` (required) and ``{prefix}DB_ECHO`` (optional).
        """
        url = os.environ.get(f"{prefix}DB_URL", "")
        echo = os.environ.get(f"{prefix}DB_ECHO", "").strip().lower() in _TRUTHY
        return cls(url=url, echo=echo)

    def create_engine(self) -> Engine:
        return create_engine(self.url, echo=self.echo, pool_pre_ping=self.pool_pre_ping)
