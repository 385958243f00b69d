"""Configuration management for bible-store."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


# Default paths
DEFAULT_DATA_DIR = Path.home() / ".bible-store"
DEFAULT_DB_FILENAME = "bible.db"
DEFAULT_CONFIG_PATH = DEFAULT_DATA_DIR / "config.yaml"

MODE_DEVELOPMENT = "development"
MODE_PACKAGED = "packaged"


def _default_mode() -> str:
    """Run mode from BIBLE_STORE_ENV, packaged unless it says development."""
    env = os.environ.get("BIBLE_STORE_ENV", "").strip().lower()
    return MODE_DEVELOPMENT if env == MODE_DEVELOPMENT else MODE_PACKAGED


@dataclass
class SearchConfig:
    """Search configuration."""
    default_limit: int = 50


@dataclass
class Config:
    """Main configuration."""
    data_dir: Path = DEFAULT_DATA_DIR
    db_filename: str = DEFAULT_DB_FILENAME
    mode: str = field(default_factory=_default_mode)
    asset_paths: list[Path] = field(default_factory=list)
    search: SearchConfig = field(default_factory=SearchConfig)
    log_level: str = "WARNING"

    def __post_init__(self):
        self.data_dir = Path(self.data_dir).expanduser()
        self.asset_paths = [Path(p).expanduser() for p in self.asset_paths]
        if self.mode not in (MODE_DEVELOPMENT, MODE_PACKAGED):
            raise ValueError(
                f"Unknown run mode {self.mode!r}; "
                f"expected {MODE_DEVELOPMENT!r} or {MODE_PACKAGED!r}"
            )

    @property
    def db_path(self) -> Path:
        """Writable store location."""
        return self.data_dir / self.db_filename

    @property
    def is_development(self) -> bool:
        return self.mode == MODE_DEVELOPMENT

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load configuration from YAML file."""
        if config_path is None:
            config_path = default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        # Parse search config
        search_data = data.get("search") or {}
        search = SearchConfig(
            default_limit=int(search_data.get("default_limit") or 50),
        )

        data_dir = DEFAULT_DATA_DIR
        if data.get("data_dir"):
            data_dir = Path(data["data_dir"]).expanduser()

        return cls(
            data_dir=data_dir,
            db_filename=data.get("db_filename") or DEFAULT_DB_FILENAME,
            mode=data.get("mode") or _default_mode(),
            asset_paths=[Path(p) for p in data.get("asset_paths") or []],
            search=search,
            log_level=str(data.get("log_level") or "WARNING").upper(),
        )

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to YAML file."""
        if config_path is None:
            config_path = default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "data_dir": str(self.data_dir),
            "db_filename": self.db_filename,
            "mode": self.mode,
            "search": {
                "default_limit": self.search.default_limit,
            },
            "log_level": self.log_level,
        }

        if self.asset_paths:
            data["asset_paths"] = [str(p) for p in self.asset_paths]

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def default_config_path() -> Path:
    """Config file location, honouring BIBLE_STORE_CONFIG."""
    env = os.environ.get("BIBLE_STORE_CONFIG")
    if env:
        return Path(env).expanduser()
    return DEFAULT_CONFIG_PATH


# Global config instance (lazy loaded)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def reload_config(config_path: Optional[Path] = None) -> Config:
    """Reload configuration from disk."""
    global _config
    _config = Config.load(config_path)
    return _config
