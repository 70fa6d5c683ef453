"""Configuration management for curriculum-retrieval."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


# Default paths
DEFAULT_DATA_DIR = Path.home() / ".curriculum-retrieval"
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "corpus.db"
DEFAULT_CONFIG_PATH = DEFAULT_DATA_DIR / "config.yaml"

DEFAULT_LIMIT = 5
MAX_LIMIT = 20
DEFAULT_BUSY_TIMEOUT = 5.0


def _expand_path(value) -> Path:
    """Expand ${VAR} references and ~ in a configured path."""
    return Path(os.path.expandvars(str(value))).expanduser()


@dataclass
class SearchConfig:
    """Retrieval configuration."""
    default_limit: int = DEFAULT_LIMIT
    max_limit: int = MAX_LIMIT

    def __post_init__(self):
        if self.max_limit < 1:
            raise ValueError(f"max_limit must be at least 1, got {self.max_limit}")
        if not (1 <= self.default_limit <= self.max_limit):
            raise ValueError(
                f"default_limit must be between 1 and {self.max_limit}, "
                f"got {self.default_limit}"
            )


@dataclass
class Config:
    """Main configuration."""
    db_path: Path = DEFAULT_DB_PATH
    busy_timeout: float = DEFAULT_BUSY_TIMEOUT  # Seconds to wait on a locked database
    search: SearchConfig = field(default_factory=SearchConfig)

    def __post_init__(self):
        self.db_path = _expand_path(self.db_path)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load configuration from YAML file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        # Parse search config
        search_data = data.get("search", {})
        search = SearchConfig(
            default_limit=search_data.get("default_limit", DEFAULT_LIMIT),
            max_limit=search_data.get("max_limit", MAX_LIMIT),
        )

        return cls(
            db_path=data.get("db_path", DEFAULT_DB_PATH),
            busy_timeout=float(data.get("busy_timeout", DEFAULT_BUSY_TIMEOUT)),
            search=search,
        )

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to YAML file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "db_path": str(self.db_path),
            "busy_timeout": self.busy_timeout,
            "search": {
                "default_limit": self.search.default_limit,
                "max_limit": self.search.max_limit,
            },
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# Global config instance (lazy loaded)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def reload_config() -> Config:
    """Reload configuration from disk."""
    global _config
    _config = Config.load()
    return _config
