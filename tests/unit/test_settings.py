import os

import pytest

from kg_common.errors import ConfigError
from kg_config import settings as settings_mod
from kg_config.settings import DEFAULT_API_URL, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("MEMORY_API_KEY", "MEMORY_API_URL", "KG_HTTP_CONNECT_TIMEOUT", "KG_HTTP_READ_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


def test_missing_credential_is_a_config_error():
    with pytest.raises(ConfigError, match="MEMORY_API_KEY"):
        load_settings()


def test_blank_credential_is_a_config_error(monkeypatch):
    monkeypatch.setenv("MEMORY_API_KEY", "   ")
    with pytest.raises(ConfigError):
        load_settings()


def test_defaults(monkeypatch):
    monkeypatch.setenv("MEMORY_API_KEY", "secret")
    s = load_settings()
    assert s.api_key == "secret"
    assert s.base_url == DEFAULT_API_URL == "http://localhost:3000"
    assert s.timeout == (3.05, 30.0)


def test_base_url_override_strips_trailing_slash(monkeypatch):
    monkeypatch.setenv("MEMORY_API_KEY", "secret")
    monkeypatch.setenv("MEMORY_API_URL", "https://memory.example.com/")
    assert load_settings().base_url == "https://memory.example.com"


def test_timeouts_from_env(monkeypatch):
    monkeypatch.setenv("MEMORY_API_KEY", "secret")
    monkeypatch.setenv("KG_HTTP_CONNECT_TIMEOUT", "1.5")
    monkeypatch.setenv("KG_HTTP_READ_TIMEOUT", "10")
    assert load_settings().timeout == (1.5, 10.0)


def test_non_numeric_timeout_is_rejected(monkeypatch):
    monkeypatch.setenv("MEMORY_API_KEY", "secret")
    monkeypatch.setenv("KG_HTTP_READ_TIMEOUT", "soon")
    with pytest.raises(ConfigError, match="KG_HTTP_READ_TIMEOUT"):
        load_settings()


def test_settings_are_immutable_and_repr_hides_key(monkeypatch):
    monkeypatch.setenv("MEMORY_API_KEY", "super-secret")
    s = load_settings()
    with pytest.raises(Exception):
        s.api_key = "other"  # type: ignore[misc]
    assert "super-secret" not in repr(s)


def test_env_file_does_not_override_existing_vars(tmp_path, monkeypatch):
    env_file = tmp_path / "custom.env"
    env_file.write_text("MEMORY_API_KEY=from-file\nKG_SETTINGS_TEST_ONLY=loaded\n", encoding="utf-8")
    monkeypatch.setenv("KG_ENV_FILE", str(env_file))
    monkeypatch.setenv("MEMORY_API_KEY", "from-env")

    settings_mod.load_env_once.cache_clear()
    try:
        assert settings_mod.load_env_once() == env_file.resolve()
        assert os.environ["MEMORY_API_KEY"] == "from-env"
        assert os.environ["KG_SETTINGS_TEST_ONLY"] == "loaded"
    finally:
        os.environ.pop("KG_SETTINGS_TEST_ONLY", None)
        settings_mod.load_env_once.cache_clear()


def test_telemetry_dir_override(tmp_path, monkeypatch):
    monkeypatch.setenv("KG_TELEMETRY_DIR", str(tmp_path / "t"))
    assert settings_mod.telemetry_dir() == (tmp_path / "t").resolve()


def test_telemetry_defaults_to_user_cache_not_working_dir(tmp_path, monkeypatch):
    project = tmp_path / "some-other-project"
    project.mkdir()
    (project / "pyproject.toml").write_text("")
    monkeypatch.chdir(project)
    monkeypatch.delenv("KG_TELEMETRY_DIR", raising=False)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))

    folder = settings_mod.telemetry_dir()

    assert folder == (tmp_path / "cache" / "kg-memory-mcp" / "telemetry").resolve()
    assert project.resolve() not in folder.parents
