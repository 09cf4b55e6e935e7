"""Configuration management for Easy Budget.

Settings live in a TOML file, ``~/.config/easybudget.toml`` unless the
``EASYBUDGET_CONFIG`` environment variable names another one. A missing file
is created with the defaults; missing keys fall back to them.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import tomllib
import tomli_w

DEFAULT_DB_FILENAME = "easybudget.db"
DEFAULT_BINDINGS_FILENAME = "category-bindings.json"


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    db_data_dir: Path
    db_filename: str
    bindings_filename: str
    log_level: str
    log_dir: Path
    server_host: str = "127.0.0.1"
    server_port: int = 5000

    @property
    def db_path(self) -> Path:
        """SQLite database holding categories, counters, expenses and incomes."""
        return self.db_data_dir / self.db_filename

    @property
    def bindings_path(self) -> Path:
        """JSON file holding the merchant category bindings."""
        return self.base_dir / self.bindings_filename

    @classmethod
    def default(cls) -> "Config":
        return cls.from_toml({})

    @classmethod
    def from_toml(cls, data: dict) -> "Config":
        """Build a Config from parsed TOML, filling every missing key with its default."""
        base_dir = Path(data.get("base_dir", Path.home() / "data" / "easybudget"))
        database = data.get("database", {})
        bindings = data.get("bindings", {})
        logging_ = data.get("logging", {})
        server = data.get("server", {})

        return cls(
            base_dir=base_dir,
            db_data_dir=Path(database.get("data_dir", base_dir / "db")),
            db_filename=database.get("filename", DEFAULT_DB_FILENAME),
            bindings_filename=bindings.get("filename", DEFAULT_BINDINGS_FILENAME),
            log_level=logging_.get("level", "INFO"),
            log_dir=Path(logging_.get("log_dir", base_dir / "logs")),
            server_host=server.get("host", "127.0.0.1"),
            server_port=int(server.get("port", 5000)),
        )

    def to_toml(self) -> dict:
        return {
            "base_dir": str(self.base_dir),
            "database": {
                "data_dir": str(self.db_data_dir),
                "filename": self.db_filename,
            },
            "bindings": {"filename": self.bindings_filename},
            "logging": {
                "level": self.log_level,
                "log_dir": str(self.log_dir),
            },
            "server": {
                "host": self.server_host,
                "port": self.server_port,
            },
        }


def get_config_path() -> Path:
    override = os.environ.get("EASYBUDGET_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "easybudget.toml"


def get_migrations_dir() -> Path:
    """Get the path to the migrations directory.

    This is always relative to the code location, not configurable.
    """
    return Path(__file__).parent / "db" / "migrations"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration, writing a default file first if there is none.

    Args:
        config_path: Config file location; defaults to get_config_path().

    Returns:
        Config object with loaded or default values.
    """
    config_path = config_path or get_config_path()

    if not config_path.exists():
        config = Config.default()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "wb") as f:
            tomli_w.dump(config.to_toml(), f)
        return config

    with open(config_path, "rb") as f:
        return Config.from_toml(tomllib.load(f))
