"""Server configuration — loads an optional YAML file plus env overrides.

The config file is located through XANODEV_CONFIG. Every key is optional;
a missing file means defaults. Environment variables win over the file so
MCP client launch configs can tweak a single setting without a file.

Example:

    docs_path: ~/xano/docs
    log_file: ~/.xanodev/server.log
    log_level: INFO
    file_path_mode: full
    parser:
      command: node
      node_path: ~/xano/node_modules
      timeout: 30
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from xanodev.errors import ConfigError, ConfigFileInvalid

CONFIG_ENV = "XANODEV_CONFIG"

_FILE_PATH_MODES = ("full", "quick_reference")


@dataclass
class ParserConfig:
    """How to launch the external XanoScript parser."""

    command: str = "node"
    node_path: str = ""  # node_modules dir holding @xano/xanoscript-language-server
    timeout: float = 30.0


@dataclass
class ServerConfig:
    """Parsed server configuration."""

    docs_path: str = ""
    log_file: str = ""
    log_level: str = "WARNING"
    file_path_mode: str = "full"
    parser: ParserConfig = field(default_factory=ParserConfig)


def _parse_parser(raw: object) -> ParserConfig:
    if raw is None:
        return ParserConfig()
    if not isinstance(raw, dict):
        raise ConfigError(
            f"'parser' must be a mapping, got {type(raw).__name__}",
            "Use keys command, node_path and timeout.",
        )
    cfg = ParserConfig()
    if "command" in raw:
        cfg.command = str(raw["command"])
    if "node_path" in raw:
        cfg.node_path = str(raw["node_path"])
    if "timeout" in raw:
        try:
            cfg.timeout = float(raw["timeout"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"parser.timeout must be a number, got {raw['timeout']!r}") from e
    return cfg


def _apply_env(cfg: ServerConfig, env: dict[str, str]) -> None:
    if env.get("XANODEV_DOCS_PATH"):
        cfg.docs_path = env["XANODEV_DOCS_PATH"]
    if env.get("XANODEV_LOG_FILE"):
        cfg.log_file = env["XANODEV_LOG_FILE"]
    if env.get("XANODEV_LOG_LEVEL"):
        cfg.log_level = env["XANODEV_LOG_LEVEL"]
    if env.get("XANODEV_NODE"):
        cfg.parser.command = env["XANODEV_NODE"]
    if env.get("XANODEV_NODE_PATH"):
        cfg.parser.node_path = env["XANODEV_NODE_PATH"]


def _validate(cfg: ServerConfig) -> None:
    if cfg.file_path_mode not in _FILE_PATH_MODES:
        raise ConfigError(
            f"file_path_mode '{cfg.file_path_mode}' is not supported",
            f"Use one of: {', '.join(_FILE_PATH_MODES)}.",
        )
    level = cfg.log_level.upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(
            f"log_level '{cfg.log_level}' is not a logging level",
            "Use DEBUG, INFO, WARNING or ERROR.",
        )
    cfg.log_level = level
    if cfg.parser.timeout <= 0:
        raise ConfigError("parser.timeout must be positive")


def load_config(path: Path | None = None, env: dict[str, str] | None = None) -> ServerConfig:
    """Load config from *path* (or $XANODEV_CONFIG), then apply env overrides.

    Returns defaults if no file is configured or the file does not exist.
    """
    env = dict(os.environ) if env is None else env
    if path is None and env.get(CONFIG_ENV):
        path = Path(env[CONFIG_ENV]).expanduser()

    cfg = ServerConfig()
    if path is not None and path.exists():
        raw = path.read_text(encoding="utf-8")
        try:
            data = yaml.safe_load(raw) or {}
        except yaml.YAMLError as e:
            raise ConfigFileInvalid(str(path), str(e)) from e

        if not isinstance(data, dict):
            raise ConfigFileInvalid(
                str(path), f"expected a YAML mapping, got {type(data).__name__}"
            )

        cfg.docs_path = str(data.get("docs_path", "") or "")
        cfg.log_file = str(data.get("log_file", "") or "")
        cfg.log_level = str(data.get("log_level", cfg.log_level))
        cfg.file_path_mode = str(data.get("file_path_mode", cfg.file_path_mode))
        cfg.parser = _parse_parser(data.get("parser"))

    _apply_env(cfg, env)
    _validate(cfg)
    return cfg
