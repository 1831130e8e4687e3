from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from entitydao.db.query import DbQueryFactory


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """
    Database URL for tests.

    Set ENTITYDAO_TEST_DB_URL to run against another backend; by default each
    test gets its own SQLite file.
    """
    return os.environ.get("ENTITYDAO_TEST_DB_URL", f"sqlite:///{tmp_path / 'entitydao.db'}")


@pytest.fixture
def engine(db_url: str) -> Iterator[Engine]:
    """
    SQLAlchemy engine for tests.

    We fail fast if the database is unreachable, so failures are actionable.
    """
    eng = create_engine(db_url)
    try:
        with eng.connect() as conn:
            conn.exec_driver_sql("SELECT 1")
    except Exception as exc:  # pragma: no cover
        pytest.fail(
            "Test database is not reachable.\n"
            f"- ENTITYDAO_TEST_DB_URL={db_url!r}\n"
            f"- Underlying error: {exc}",
            pytrace=False,
        )

    yield eng
    eng.dispose()


@pytest.fixture
def table_factory(engine: Engine) -> Iterator[Callable[[str, str], str]]:
    """
    Factory fixture creating tables with an auto-increment ``id`` primary key.

    Usage:
        table_factory("users", "name VARCHAR(255) NULL")
    """
    if engine.dialect.name == "mysql":
        id_sql = "id BIGINT NOT NULL AUTO_INCREMENT PRIMARY KEY"
    else:
        id_sql = "id INTEGER PRIMARY KEY AUTOINCREMENT"

    created: list[str] = []

    def _create(table: str, columns_sql: str) -> str:
        with engine.begin() as conn:
            conn.exec_driver_sql(f"DROP TABLE IF EXISTS {table}")
            conn.exec_driver_sql(f"CREATE TABLE {table} ({id_sql}, {columns_sql})")
        created.append(table)
        return table

    yield _create

    with engine.begin() as conn:
        for table in created:
            conn.exec_driver_sql(f"DROP TABLE IF EXISTS {table}")


@pytest.fixture
def schema(table_factory: Callable[[str, str], str]) -> None:
    """
    The ``users`` / ``posts`` tables shared by DAO tests.

    ``posts.user_id`` references ``users.id``.
    """
    table_factory("users", "name VARCHAR(255) NULL, email VARCHAR(255) NULL, age INTEGER NULL")
    table_factory("posts", "user_id BIGINT NULL, title VARCHAR(255) NULL")


@pytest.fixture
def query_factory(engine: Engine) -> DbQueryFactory:
    return DbQueryFactory(engine)
