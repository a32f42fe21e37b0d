# -*- coding: utf-8 -*-
import pytest
from pydantic import ValidationError

from affiliate_portal.core import core_health
from affiliate_portal.core.config_core import Settings, get_settings


def test_test_environment_is_normalized():
    assert get_settings().env_normalized == "test"
    assert not get_settings().is_prod


def test_csv_lists_are_split_and_deduplicated():
    s = Settings(CORS_ORIGINS="https://a.test, https://b.test", SUB_ID_PARAMS="s1,s2,s1")
    assert s.CORS_ORIGINS == ["https://a.test", "https://b.test"]
    assert s.SUB_ID_PARAMS == ["s1", "s2"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("postgres://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql+asyncpg://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("sqlite+aiosqlite://", "sqlite+aiosqlite://"),
    ],
)
def test_database_url_asyncpg(raw, expected):
    assert Settings(DATABASE_URL=raw).database_url_asyncpg() == expected


def test_missing_database_url_raises():
    with pytest.raises(RuntimeError):
        Settings(DATABASE_URL=None).database_url_asyncpg()


@pytest.mark.parametrize("attempts", [0, 51])
def test_code_attempts_bounds(attempts):
    with pytest.raises(ValidationError):
        Settings(CODE_MAX_ATTEMPTS=attempts)


@pytest.mark.parametrize("env, normalized", [("production", "prod"), ("development", "dev"), ("local", "local")])
def test_env_normalization(env, normalized):
    assert Settings(ENV=env).env_normalized == normalized


def test_debug_dump_has_no_secrets():
    dump = Settings(APP_SECRET="hunter2", DATABASE_URL="postgres://u:pw@h/db").debug_dump()
    assert "hunter2" not in str(dump)
    assert "pw" not in str(dump)
    assert dump["dbUrlSet"] == "yes"


def test_core_health_is_ok_with_defaults():
    assert core_health()["ok"] is True
