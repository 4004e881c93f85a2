"""Unit tests for configuration module."""

from __future__ import annotations

from pathlib import Path

import pytest

from db_launcher.domain.entities import ServerConfig
from db_launcher.infrastructure.config import Config, LaunchConfig, get_config


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = Config()

        assert config.launch.mode == "server"
        assert config.launch.db_name == "test"
        assert config.launch.silent is True
        assert config.launch.trace is False
        assert config.launch.tls is False
        assert config.launch.port == 0
        assert config.launch.is_transient is False
        assert config.launch.delete_on_entry is False
        assert config.launch.delete_on_exit is False
        assert config.metrics.enabled is False

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested settings are read from DB_LAUNCHER_ variables."""
        monkeypatch.setenv("DB_LAUNCHER_LAUNCH__MODE", "webserver")
        monkeypatch.setenv("DB_LAUNCHER_LAUNCH__DB_NAME", "data/testdb")
        monkeypatch.setenv("DB_LAUNCHER_LAUNCH__PORT", "8080")
        monkeypatch.setenv("DB_LAUNCHER_LAUNCH__DELETE_ON_EXIT", "true")

        config = Config()

        assert config.launch.mode == "webserver"
        assert config.launch.db_name == "data/testdb"
        assert config.launch.port == 8080
        assert config.launch.delete_on_exit is True

    def test_invalid_port(self) -> None:
        """Ports outside 0-65535 are rejected."""
        with pytest.raises(ValueError):
            LaunchConfig(port=70000)

    def test_empty_db_name(self) -> None:
        with pytest.raises(ValueError):
            LaunchConfig(db_name="")

    def test_mode_is_not_validated_here(self) -> None:
        """Unsupported modes are reported by the server factory, not the settings."""
        assert LaunchConfig(mode="servlet").mode == "servlet"

    def test_to_server_config(self, temp_dir: Path) -> None:
        """Settings convert to the immutable launch record."""
        config = Config(
            launch=LaunchConfig(
                mode="WebServer",
                db_name="data/testdb",
                port=8080,
                is_transient=False,
                delete_on_entry=True,
                base_dir=temp_dir,
            )
        )

        server_config = config.to_server_config()

        assert isinstance(server_config, ServerConfig)
        assert server_config.mode == "WebServer"
        assert server_config.db_name == "data/testdb"
        assert server_config.port == 8080
        assert server_config.delete_on_entry is True
        assert server_config.base_dir == temp_dir


@pytest.mark.unit
class TestServerConfig:
    """Tests for the ServerConfig record."""

    def test_defaults(self) -> None:
        config = ServerConfig(db_name="testdb")

        assert config.mode == "server"
        assert config.silent is True
        assert config.trace is False
        assert config.tls is False
        assert config.port == 0
        assert config.base_dir == Path(".")

    def test_is_immutable(self) -> None:
        config = ServerConfig(db_name="testdb")
        with pytest.raises(AttributeError):
            config.db_name = "other"  # type: ignore[misc]

    def test_requires_db_name(self) -> None:
        with pytest.raises(ValueError):
            ServerConfig(db_name="")

    def test_rejects_bad_port(self) -> None:
        with pytest.raises(ValueError):
            ServerConfig(db_name="testdb", port=-1)


@pytest.mark.unit
class TestConfigSingleton:
    """Tests for get_config singleton."""

    def test_get_config_returns_same_instance(self) -> None:
        """Test that get_config returns the same instance."""
        config1 = get_config()
        config2 = get_config()
        assert config1 is config2
