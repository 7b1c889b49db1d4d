"""Configuration management for the prompt server.

This module provides the configuration dataclass and a manager that
persists settings as a JSON file, with environment variable overrides.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Callable, List, Literal, Optional, Union

logger = logging.getLogger(__name__)

ENV_PREFIX = "MCP_PROMPTS_"


@dataclass
class Config:
    """
    Server configuration.

    All fields have sensible defaults - the server works without any
    configuration file.
    """

    server_name: str = "mcp-prompts"

    # Transport: stdio for local clients, http for streamable HTTP
    mode: Literal["stdio", "http"] = "stdio"

    # HTTP settings
    http_host: str = "127.0.0.1"
    http_port: int = 3141
    http_path: str = "/mcp"

    # Passed to logging.basicConfig and uvicorn
    log_level: str = "warning"

    # Dotted module paths scanned for @Prompt functions and classes
    prompt_modules: List[str] = field(default_factory=list)

    def is_valid_for_mode(self) -> tuple[bool, str]:
        """
        Validate the settings the selected transport needs.

        Returns:
            (ok, reason) where reason is empty when ok is True.

        Examples:
            >>> Config(mode="http", http_port=80).is_valid_for_mode()
            (True, '')

            >>> Config(mode="http", http_port=70000).is_valid_for_mode()
            (False, 'Port must be between 1 and 65535')
        """
        if self.mode == "stdio":
            return True, ""
        if self.mode == "http":
            if not (1 <= self.http_port <= 65535):
                return False, "Port must be between 1 and 65535"
            if not self.http_path.startswith("/"):
                return False, "HTTP path must start with '/'"
            return True, ""
        return False, f"Unknown mode: {self.mode}"

    def to_dict(self) -> dict:
        """Convert to a dict suitable for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """
        Build a Config from a parsed JSON object. Missing keys keep their defaults.

        Keys that are not dataclass fields are ignored, so config files
        written by newer versions still load.

        Examples:
            >>> Config.from_dict({"http_port": 8080}).http_port
            8080
        """
        return cls(
            **{k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        )


def _env_overrides(environ: dict) -> dict:
    """Read MCP_PROMPTS_<FIELD> variables, converted to each field's type."""
    overrides: dict = {}
    for f in fields(Config):
        raw = environ.get(ENV_PREFIX + f.name.upper())
        if raw is None:
            continue
        if f.name == "http_port":
            try:
                overrides[f.name] = int(raw)
            except ValueError:
                logger.warning("Ignoring invalid %s%s=%r", ENV_PREFIX, f.name.upper(), raw)
        elif f.name == "prompt_modules":
            overrides[f.name] = [m.strip() for m in raw.split(",") if m.strip()]
        else:
            overrides[f.name] = raw
    return overrides


class ConfigManager:
    """
    Reads and writes Config as a JSON file.

    Values are layered: dataclass defaults, then the JSON file (if it
    exists), then MCP_PROMPTS_* environment variables.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None, environ: Optional[dict] = None):
        """
        Create a manager for one config file.

        Args:
            path: JSON config file. None means defaults + environment only.
            environ: Environment mapping (defaults to os.environ).
        """
        self._path = Path(path) if path is not None else None
        self._environ = environ if environ is not None else os.environ
        self._listeners: list[Callable[[Config], None]] = []

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def load(self) -> Config:
        """
        Load config, merging defaults, file values and environment overrides.

        Raises:
            ValueError: If the file exists but is not a JSON object.
        """
        raw: dict = {}
        if self._path is not None and self._path.exists():
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError(f"Config file {self._path} must contain a JSON object")
        raw.update(_env_overrides(dict(self._environ)))
        return Config.from_dict(raw)

    def save(self, config: Config) -> None:
        """
        Write config to the JSON file, then call every on_change listener.

        Args:
            config: Settings to write.
        """
        if self._path is None:
            raise ValueError("ConfigManager has no file path to save to")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
        for listener in self._listeners:
            listener(config)

    def on_change(self, callback: Callable[[Config], None]) -> None:
        """
        Call callback with the new Config after each save().
        """
        self._listeners.append(callback)

    def get_default(self) -> Config:
        """
        Built-in defaults, ignoring both the file and the environment.
        """
        return Config()
