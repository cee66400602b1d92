"""Tests for configuration settings."""

import logging as _logging
import os as _os
import pathlib as _pathlib
import unittest.mock as _mock

import pydantic as _pydantic
import pytest as _pytest

import dotstore.config as config
import dotstore.config.settings as settings_module
import dotstore.store as store


class TestSettingsDefaults:
    """Settings values with a clean environment."""

    def test_defaults(self) -> None:
        """Every field has its documented default."""
        settings = config.Settings.construct_without_dotenv()
        assert settings.delimiter == "."
        assert settings.autosave is True
        assert settings.readonly is False
        assert settings.log_level == "WARNING"
        assert settings.cache.enabled is True
        assert settings.cache.suffix == ".cache"

    def test_log_level_number(self) -> None:
        """The level name maps to the logging constant."""
        settings = config.Settings.construct_without_dotenv(log_level="debug")
        assert settings.log_level == "DEBUG"
        assert settings.log_level_number == _logging.DEBUG


class TestSettingsEnvironment:
    """DOTSTORE_ environment overrides."""

    def test_flat_overrides(self) -> None:
        """Top-level fields read DOTSTORE_<FIELD>."""
        env = {"DOTSTORE_DELIMITER": "/", "DOTSTORE_AUTOSAVE": "false", "DOTSTORE_LOG_LEVEL": "info"}
        with _mock.patch.dict(_os.environ, env):
            settings = config.Settings.construct_without_dotenv()
        assert settings.delimiter == "/"
        assert settings.autosave is False
        assert settings.log_level == "INFO"

    def test_nested_overrides(self) -> None:
        """Nested fields use the double underscore delimiter."""
        env = {"DOTSTORE_CACHE__ENABLED": "0", "DOTSTORE_CACHE__SUFFIX": ".bin"}
        with _mock.patch.dict(_os.environ, env):
            settings = config.Settings.construct_without_dotenv()
        assert settings.cache.enabled is False
        assert settings.cache.suffix == ".bin"

    def test_constructor_beats_environment(self) -> None:
        """Explicit arguments take precedence."""
        with _mock.patch.dict(_os.environ, {"DOTSTORE_READONLY": "true"}):
            settings = config.Settings.construct_without_dotenv(readonly=False)
        assert settings.readonly is False

    @_pytest.mark.parametrize(
        ("key", "value"),
        [
            ("DOTSTORE_DELIMITER", ""),
            ("DOTSTORE_LOG_LEVEL", "LOUD"),
            ("DOTSTORE_CACHE__SUFFIX", ""),
        ],
    )
    def test_invalid_values_rejected(self, key: str, value: str) -> None:
        """Bad values fail validation."""
        with _mock.patch.dict(_os.environ, {key: value}), _pytest.raises(_pydantic.ValidationError):
            config.Settings.construct_without_dotenv()


class TestEnvFile:
    """Choosing the .env file."""

    def test_explicit_env_file(self, tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch) -> None:
        """DOTSTORE_ENV_FILE wins when it exists."""
        env_file = tmp_path / "custom.env"
        env_file.write_text("DOTSTORE_DELIMITER=/\n", encoding="utf-8")
        monkeypatch.setenv("DOTSTORE_ENV_FILE", str(env_file))
        assert settings_module._get_env_file() == str(env_file)

    def test_missing_explicit_env_file(self, tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch) -> None:
        """A missing explicit file disables .env loading."""
        (tmp_path / ".env").write_text("", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DOTSTORE_ENV_FILE", str(tmp_path / "missing.env"))
        assert settings_module._get_env_file() is None

    def test_local_env_file(self, tmp_path: _pathlib.Path, monkeypatch: _pytest.MonkeyPatch) -> None:
        """./.env is used when present."""
        monkeypatch.chdir(tmp_path)
        assert settings_module._get_env_file() is None
        (tmp_path / ".env").write_text("", encoding="utf-8")
        assert settings_module._get_env_file() == ".env"

    def test_env_file_values_loaded(self, tmp_path: _pathlib.Path) -> None:
        """Values in an env file are read."""
        env_file = tmp_path / "custom.env"
        env_file.write_text("DOTSTORE_DELIMITER=|\nDOTSTORE_CACHE__ENABLED=false\n", encoding="utf-8")
        settings = config.Settings(_env_file=env_file)  # type: ignore[call-arg]
        assert settings.delimiter == "|"
        assert settings.cache.enabled is False


class TestOpenStore:
    """Building stores from settings."""

    def test_open_store_applies_settings(self, tmp_path: _pathlib.Path) -> None:
        """Flags, delimiter and cache come from the settings."""
        settings = config.Settings.construct_without_dotenv(
            delimiter="/",
            autosave=False,
            readonly=True,
            cache=config.CacheConfig(suffix=".bin"),
        )
        opened = settings.open_store(tmp_path / "prefs.yaml")
        assert isinstance(opened, store.PersistentStore)
        assert opened.name == "prefs"
        assert opened.autosave is False
        assert opened.readonly is True
        assert opened.tree.delimiter == "/"

        opened.set("a/b", 1)
        opened.save()
        assert (tmp_path / "prefs.yaml.bin").is_file()

    def test_open_store_with_name(self, tmp_path: _pathlib.Path) -> None:
        """An explicit name is passed through."""
        settings = config.Settings.construct_without_dotenv()
        assert settings.open_store(tmp_path / "prefs.yaml", "custom").name == "custom"

    def test_build_cache(self) -> None:
        """build_cache() mirrors the cache section."""
        settings = config.Settings.construct_without_dotenv(cache={"enabled": False, "suffix": ".c"})
        cache = settings.build_cache()
        assert cache.enabled is False
        assert cache.suffix == ".c"
