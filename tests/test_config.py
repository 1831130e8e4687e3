from __future__ import annotations

import pytest

from entitydao.config import DaoConfig, DbConfig


def test_dao_config_defaults_to_generated_keys() -> None:
    assert DaoConfig().generated_keys is True


def test_db_config_rejects_empty_url() -> None:
    with pytest.raises(ValueError):
        DbConfig(url="")


def test_db_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENTITYDAO_DB_URL", "sqlite://")
    monkeypatch.setenv("ENTITYDAO_DB_ECHO", "true")

    config = DbConfig.from_env()

    assert config.url == "sqlite://"
    assert config.echo is True


def test_db_config_from_env_with_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_DB_URL", "sqlite://")
    monkeypatch.delenv("APP_DB_ECHO", raising=False)

    config = DbConfig.from_env(prefix="APP_")

    assert config.url == "sqlite://"
    assert config.echo is False


def test_db_config_from_env_requires_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ENTITYDAO_DB_URL", raising=False)

    with pytest.raises(ValueError):
        DbConfig.from_env()


def test_db_config_creates_working_engine() -> None:
    engine = DbConfig(url="sqlite://").create_engine()
    try:
        with engine.connect() as conn:
            assert conn.exec_driver_sql("SELECT 1").scalar() == 1
    finally:
        engine.dispose()
