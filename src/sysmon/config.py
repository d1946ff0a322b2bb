"""Configuration system for sysmon."""

from dataclasses import dataclass, fields
from pathlib import Path

import tomlkit


@dataclass
class Config:
    """Main configuration container."""

    refresh_interval: int = 2  # Seconds between samples
    log_level: str = "info"
    log_max_bytes: int = 1024 * 1024  # Max log file size (1MB)
    log_backup_count: int = 2  # Number of backup log files to keep

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "sysmon"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @property
    def state_dir(self) -> Path:
        """State directory for logs."""
        return Path.home() / ".local" / "state" / "sysmon"

    @property
    def log_path(self) -> Path:
        """Log file path."""
        return self.state_dir / "sysmon.log"

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for f in fields(self):
            doc.add(f.name, getattr(self, f.name))
        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values."""
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f)
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        try:
            return cls(
                refresh_interval=int(data.get("refresh_interval", defaults.refresh_interval)),
                log_level=str(data.get("log_level", defaults.log_level)),
                log_max_bytes=int(data.get("log_max_bytes", defaults.log_max_bytes)),
                log_backup_count=int(data.get("log_backup_count", defaults.log_backup_count)),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid config value in {path}: {e}") from e
