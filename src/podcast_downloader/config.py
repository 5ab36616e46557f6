"""Configuration management for podcast-downloader."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from podcast_downloader.exceptions import ConfigError
from podcast_downloader.models import SelectionMode

CONFIG_DIR = Path.home() / ".config" / "podcast-downloader"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_OUTPUT_DIR = str(Path.home() / "Downloads" / "Podcasts")


@dataclass
class Config:
    """Application configuration."""

    output_dir: str = DEFAULT_OUTPUT_DIR
    default_mode: str = SelectionMode.LATEST.value
    max_attempts: int = 3
    retry_delay: float = 3.0
    timeout: float = 30.0

    @classmethod
    def load(cls, path: Path | None = None) -> Config:
        """Load configuration from disk, returning defaults if not found."""
        path = path or CONFIG_FILE
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            raise ConfigError(f"Failed to read config: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Failed to read config: expected an object in {path}")

        config = cls()
        for key, value in data.items():
            if key in config.field_names():
                config.set(key, value)
        return config

    def save(self, path: Path | None = None) -> None:
        """Save configuration to disk."""
        path = path or CONFIG_FILE
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(asdict(self), indent=2) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            raise ConfigError(f"Failed to write config: {e}") from e

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def set(self, key: str, value: object) -> None:
        """Set one key, coercing strings from the command line to the field type."""
        if key not in self.field_names():
            raise ConfigError(f"Unknown config key: {key}")

        current = getattr(self, key)
        try:
            if isinstance(current, int):
                value = int(value)
            elif isinstance(current, float):
                value = float(value)
            else:
                value = str(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value for {key}: {value!r}") from e

        setattr(self, key, value)
        self.validate()

    def validate(self) -> None:
        if self.default_mode not in {m.value for m in SelectionMode}:
            raise ConfigError(f"Unknown selection mode: {self.default_mode!r}")
        if self.default_mode == SelectionMode.CUSTOM:
            raise ConfigError("default_mode cannot be 'custom' (it needs a count)")
        if self.max_attempts < 1:
            raise ConfigError("max_attempts must be at least 1")
        if self.retry_delay < 0:
            raise ConfigError("retry_delay cannot be negative")
        if self.timeout <= 0:
            raise ConfigError("timeout must be positive")
