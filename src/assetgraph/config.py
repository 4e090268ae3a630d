"""
Configuration loading.

Reads the YAML configuration (root domains and the asset graph location)
and plain-text domain list files.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

import yaml

from .errors import ConfigError

log = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"
ASSET_DB_FILENAME = "assetdb.json"


@dataclass
class Config:
    """Settings shared by the command-line tools."""
    domains: list[str] = field(default_factory=list)
    database: str = ""
    directory: str = ""


def load_config(path: str) -> Config:
    """
    Load a YAML configuration file.

    Recognized keys::

        scope:
          domains: [example.com, example.org]
        options:
          database: /path/to/assetdb.json
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load the configuration file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} does not contain a YAML mapping")

    scope = data.get("scope") or {}
    options = data.get("options") or {}
    domains = scope.get("domains") or []
    if not isinstance(domains, list):
        raise ConfigError("scope.domains must be a list")

    database = options.get("database") or ""
    if database and not os.path.isabs(database):
        database = os.path.join(os.path.dirname(os.path.abspath(path)), database)

    cfg = Config(
        domains=_unique([str(d).strip().lower() for d in domains if str(d).strip()]),
        database=database,
        directory=str(data.get("dir") or ""),
    )
    log.debug("Loaded configuration from %s: %s", path, cfg)
    return cfg


def acquire_config(
    directory: Optional[str] = None, config_file: Optional[str] = None
) -> Optional[Config]:
    """
    Load the explicit configuration file, else ``config.yaml`` inside the
    directory when present. Returns None when neither applies.
    """
    if config_file:
        return load_config(config_file)
    if directory:
        candidate = os.path.join(directory, CONFIG_FILENAME)
        if os.path.isfile(candidate):
            return load_config(candidate)
    return None


def read_list_file(path: str) -> list[str]:
    """Read one entry per line, skipping blanks and '#' comments."""
    try:
        with open(path) as f:
            lines = f.read().splitlines()
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    entries = []
    for line in lines:
        line = line.split("#", 1)[0].strip().lower()
        if line:
            entries.append(line)
    return _unique(entries)


def resolve_database(directory: Optional[str], cfg: Optional[Config]) -> str:
    """Path of the asset graph file to open."""
    if cfg is not None and cfg.database:
        return cfg.database
    directory = directory or (cfg.directory if cfg is not None else "")
    return os.path.join(directory or ".", ASSET_DB_FILENAME)


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))
