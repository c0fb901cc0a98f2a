"""Configuration file discovery and lookup for lstn.

The configuration is a YAML file whose keys mirror the long flag names. Keys
may also nest following the JSON form of the options (``endpoint: {npm: ...}``).
"""

from pathlib import Path
from typing import Any

import yaml

from .constants import CONFIG_FILE_NAMES, HOME_CONFIG_FILE_NAME
from .errors import ConfigError


class ConfigSource:
    """Values read from the configuration file, if one was found."""

    def __init__(self, path: Path | None = None, data: dict[str, Any] | None = None) -> None:
        self.path = path
        self.data = data or {}

    @property
    def found(self) -> bool:
        return self.path is not None

    @classmethod
    def load(cls, path: Path) -> "ConfigSource":
        """Parse a configuration file.

        Raises:
            ConfigError: If the file cannot be read or is not a YAML mapping
        """
        try:
            text = path.read_text()
        except OSError as e:
            raise ConfigError(f"couldn't read the configuration file {path}: {e.strerror}") from e
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"couldn't parse the configuration file {path}: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"couldn't parse the configuration file {path}: not a mapping")
        return cls(path, data)

    @classmethod
    def discover(
        cls,
        cwd: Path | None = None,
        home: Path | None = None,
        explicit: Path | None = None,
    ) -> "ConfigSource":
        """Find and load the configuration file.

        An explicit path must exist. Otherwise the working directory is
        searched first, then the home directory. No file found is fine.
        """
        if explicit is not None:
            if not explicit.is_file():
                raise ConfigError(f"couldn't find the configuration file {explicit}")
            return cls.load(explicit)

        cwd = cwd or Path.cwd()
        candidates = [cwd / name for name in CONFIG_FILE_NAMES]
        if home is None:
            try:
                home = Path.home()
            except RuntimeError:
                home = None
        if home is not None:
            candidates.append(home / HOME_CONFIG_FILE_NAME)

        for candidate in candidates:
            if candidate.is_file():
                return cls.load(candidate)
        return cls()

    def lookup(self, flag: str | None, json_path: tuple[str, ...]) -> Any:
        """Value for an option: flat key named like the flag first, then the nested JSON path."""
        if flag and flag in self.data:
            return self.data[flag]
        node: Any = self.data
        for key in json_path:
            if not isinstance(node, dict) or key not in node:
                return None
            node = node[key]
        return node

    def message(self) -> str:
        if self.path is None:
            return "Running without a configuration file"
        return f"Using config file: {self.path}"
