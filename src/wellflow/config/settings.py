"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".wellflow"


def _default_db_path() -> Path:
    """Return the default database path."""
    return _default_config_dir() / "wellflow.db"


def default_config_path() -> Path:
    """Return the default config.yaml location."""
    return _default_config_dir() / "config.yaml"


@dataclass
class DatabaseConfig:
    """Database configuration."""

    path: Path = field(default_factory=_default_db_path)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"


@dataclass
class SchedulerConfig:
    """Tick intervals used by long-running commands such as `fast watch`."""

    display_interval_seconds: float = 1.0
    day_check_interval_seconds: float = 60.0


@dataclass
class Settings:
    """Main application settings."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.wellflow/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        if "database" in data:
            db_data = data["database"] or {}
            if "path" in db_data:
                settings.database.path = Path(db_data["path"]).expanduser()

        if "logging" in data:
            log_data = data["logging"] or {}
            if "level" in log_data:
                settings.logging.level = str(log_data["level"]).upper()

        if "scheduler" in data:
            sched_data = data["scheduler"] or {}
            if "display_interval_seconds" in sched_data:
                settings.scheduler.display_interval_seconds = float(
                    sched_data["display_interval_seconds"]
                )
            if "day_check_interval_seconds" in sched_data:
                settings.scheduler.day_check_interval_seconds = float(
                    sched_data["day_check_interval_seconds"]
                )

        return settings

    def to_dict(self) -> dict:
        """Return the YAML-shaped representation of these settings."""
        return {
            "database": {
                "path": str(self.database.path),
            },
            "logging": {
                "level": self.logging.level,
            },
            "scheduler": {
                "display_interval_seconds": self.scheduler.display_interval_seconds,
                "day_check_interval_seconds": self.scheduler.day_check_interval_seconds,
            },
        }

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.wellflow/config.yaml
        """
        if config_path is None:
            config_path = default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings

