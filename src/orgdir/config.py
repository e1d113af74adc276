"""Configuration: data directory and table file names, optionally from org.yaml."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel

from orgdir.io.fileops import read_text_safe

CONFIG_FILENAME = "org.yaml"
DATA_DIR_ENV = "ORG_DATA_DIR"


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or parsed."""


class OrgConfig(BaseModel):
    """Where the three tables live."""

    data_dir: str = "."
    members_file: str = "members.csv"
    teams_file: str = "teams.csv"
    titles_file: str = "titles.csv"

    @classmethod
    def load(cls, path: str | Path) -> "OrgConfig":
        """Load config from a YAML file. Relative ``data_dir`` is resolved
        against the file's directory."""
        path = Path(path)
        try:
            data = yaml.safe_load(read_text_safe(path)) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must contain a mapping")
        try:
            cfg = cls(**data)
        except ValueError as e:
            raise ConfigError(f"Invalid config {path}: {e}") from e
        if not Path(cfg.data_dir).is_absolute():
            cfg = cfg.model_copy(update={"data_dir": str(path.parent / cfg.data_dir)})
        return cfg

    @classmethod
    def resolve(
        cls,
        *,
        data_dir: str | None = None,
        config_path: str | None = None,
    ) -> "OrgConfig":
        """Resolve config: explicit file, else ``org.yaml`` in the data
        directory, else defaults. ``data_dir`` (or ``$ORG_DATA_DIR``) wins over
        the file's own ``data_dir``."""
        data_dir = data_dir or os.environ.get(DATA_DIR_ENV)
        if config_path:
            cfg = cls.load(config_path)
        else:
            candidate = Path(data_dir or ".") / CONFIG_FILENAME
            cfg = cls.load(candidate) if candidate.exists() else cls()
        if data_dir:
            cfg = cfg.model_copy(update={"data_dir": data_dir})
        return cfg
