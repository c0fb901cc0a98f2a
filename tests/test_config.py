"""Tests for configuration file discovery and lookup."""

from pathlib import Path

import pytest

from lstn.config import ConfigSource
from lstn.errors import ConfigError


class TestDiscover:
    """Tests for ConfigSource.discover."""

    def test_nothing_found(self, tmp_path: Path) -> None:
        config = ConfigSource.discover(cwd=tmp_path, home=tmp_path / "home")
        assert not config.found
        assert config.message() == "Running without a configuration file"

    def test_working_directory_first(self, tmp_path: Path) -> None:
        home = tmp_path / "home"
        home.mkdir(exist_ok=True)
        (home / ".lstn.yaml").write_text("timeout: 100\n")
        (tmp_path / ".listendev.yaml").write_text("timeout: 200\n")

        config = ConfigSource.discover(cwd=tmp_path, home=home)

        assert config.path == tmp_path / ".listendev.yaml"
        assert config.data == {"timeout": 200}

    def test_nested_directory_file(self, tmp_path: Path) -> None:
        (tmp_path / ".listendev").mkdir()
        (tmp_path / ".listendev" / "config.yaml").write_text("loglevel: debug\n")
        config = ConfigSource.discover(cwd=tmp_path, home=tmp_path / "home")
        assert config.lookup("loglevel", ("loglevel",)) == "debug"

    def test_home_fallback(self, tmp_path: Path) -> None:
        home = tmp_path / "home"
        home.mkdir(exist_ok=True)
        (home / ".lstn.yaml").write_text("timeout: 100\n")
        config = ConfigSource.discover(cwd=tmp_path, home=home)
        assert config.path == home / ".lstn.yaml"
        assert config.message() == f"Using config file: {home / '.lstn.yaml'}"

    def test_explicit_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="couldn't find the configuration file"):
            ConfigSource.discover(explicit=tmp_path / "missing.yaml")


class TestLoad:
    """Tests for ConfigSource.load."""

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert ConfigSource.load(path).data == {}

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="not a mapping"):
            ConfigSource.load(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("timeout: [1, 2\n")
        with pytest.raises(ConfigError, match="couldn't parse the configuration file"):
            ConfigSource.load(path)


class TestLookup:
    """Tests for ConfigSource.lookup."""

    def test_flat_key(self) -> None:
        config = ConfigSource(Path("c.yaml"), {"gh-token": "abc"})
        assert config.lookup("gh-token", ("gh-token",)) == "abc"

    def test_nested_key(self) -> None:
        config = ConfigSource(Path("c.yaml"), {"endpoint": {"pypi": "http://localhost:3000"}})
        assert config.lookup("pypi-endpoint", ("endpoint", "pypi")) == "http://localhost:3000"

    def test_missing_key(self) -> None:
        config = ConfigSource(Path("c.yaml"), {"endpoint": "oops"})
        assert config.lookup("npm-endpoint", ("endpoint", "npm")) is None
