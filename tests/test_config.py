"""Configuration tests — the insecure default secret is development-only."""

import pytest
from pydantic import ValidationError

from authgate.config import INSECURE_DEFAULT_SECRET, Settings


def test_development_allows_default_secret():
    cfg = Settings(environment="development", jwt_secret=INSECURE_DEFAULT_SECRET)
    assert cfg.jwt_secret == INSECURE_DEFAULT_SECRET
    assert cfg.token_expire_days == 7


def test_production_refuses_default_secret():
    with pytest.raises(ValidationError):
        Settings(environment="production", jwt_secret=INSECURE_DEFAULT_SECRET)


def test_production_accepts_explicit_secret():
    cfg = Settings(environment="production", jwt_secret="x" * 32)
    assert cfg.jwt_secret == "x" * 32


def test_empty_secret_is_refused():
    with pytest.raises(ValidationError):
        Settings(jwt_secret="")


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("AUTHGATE_TOKEN_EXPIRE_DAYS", "3")
    assert Settings().token_expire_days == 3


def test_engine_pool_follows_settings():
    from authgate.config import settings
    from authgate.db.engine import engine

    pool = engine.sync_engine.pool
    assert pool.size() == settings.db_pool_size
    assert pool._pre_ping is settings.db_pool_pre_ping
