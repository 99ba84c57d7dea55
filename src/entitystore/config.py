"""
Configuration Management for entitystore

🔧 Unified Configuration System:
Settings for storage services, backends and logging, loadable from
environment variables, JSON/YAML files or plain dictionaries.
"""

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging
import os
import sys

import yaml

from .core.timeunit import TimeUnit

ENV_PREFIX = "ENTITYSTORE_"

class Environment(Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"

class BackendType(Enum):
    """Available storage backends"""
    JSON = "json"
    MONGO = "mongo"

@dataclass
class CacheConfig:
    """Cache TTL; no expiry when ``cache_time`` is None"""
    cache_time: Optional[float] = None
    cache_time_unit: TimeUnit = TimeUnit.MINUTES

@dataclass
class AutoSaveConfig:
    """Periodic save-all of cached entities"""
    enabled: bool = True
    interval: float = 15
    unit: TimeUnit = TimeUnit.MINUTES

@dataclass
class JSONBackendConfig:
    folder: str = "data"

@dataclass
class MongoBackendConfig:
    connection_string: str = "mongodb://localhost:27017/entitystore"
    database_name: Optional[str] = None
    client_options: Dict[str, Any] = field(default_factory=dict)

@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5

@dataclass
class StorageSettings:
    """Complete storage configuration"""
    environment: Environment = Environment.DEVELOPMENT
    backend: BackendType = BackendType.JSON
    tick_interval: float = 1
    tick_interval_unit: TimeUnit = TimeUnit.SECONDS

    cache: CacheConfig = field(default_factory=CacheConfig)
    auto_save: AutoSaveConfig = field(default_factory=AutoSaveConfig)
    json_file: JSONBackendConfig = field(default_factory=JSONBackendConfig)
    mongo: MongoBackendConfig = field(default_factory=MongoBackendConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def for_environment(cls, environment: Environment) -> "StorageSettings":
        """Create settings for a specific environment"""
        settings = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            settings.logging.level = "DEBUG"

        elif environment == Environment.TESTING:
            settings.logging.level = "WARNING"
            settings.auto_save.enabled = False

        elif environment == Environment.PRODUCTION:
            settings.logging.level = "INFO"
            settings.logging.file_path = "/var/log/entitystore/storage.log"

        return settings

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StorageSettings":
        """Create settings from a dictionary; unknown keys are ignored"""
        environment = Environment(config_dict.get("environment", Environment.DEVELOPMENT.value))
        settings = cls.for_environment(environment)

        if "backend" in config_dict:
            settings.backend = BackendType(config_dict["backend"])
        if "tick_interval" in config_dict:
            settings.tick_interval = float(config_dict["tick_interval"])
        if "tick_interval_unit" in config_dict:
            settings.tick_interval_unit = TimeUnit.parse(config_dict["tick_interval_unit"])

        for section in ("cache", "auto_save", "json_file", "mongo", "logging"):
            values = config_dict.get(section)
            if not values:
                continue
            target = getattr(settings, section)
            known = {f.name for f in fields(target)}
            for key, value in values.items():
                if key not in known:
                    continue
                if key in ("cache_time_unit", "unit"):
                    value = TimeUnit.parse(value)
                setattr(target, key, value)

        return settings

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "StorageSettings":
        """Load settings from a JSON or YAML file"""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            if config_path.suffix == ".json":
                config_dict = json.load(f)
            elif config_path.suffix in (".yml", ".yaml"):
                config_dict = yaml.safe_load(f) or {}
            else:
                raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        return cls.from_dict(config_dict)

    @classmethod
    def from_environment(cls) -> "StorageSettings":
        """Create settings from ENTITYSTORE_* environment variables"""
        env_name = os.getenv(f"{ENV_PREFIX}ENV", Environment.DEVELOPMENT.value)
        settings = cls.for_environment(Environment(env_name))

        if os.getenv(f"{ENV_PREFIX}BACKEND"):
            settings.backend = BackendType(os.getenv(f"{ENV_PREFIX}BACKEND").lower())

        if os.getenv(f"{ENV_PREFIX}DATA_FOLDER"):
            settings.json_file.folder = os.getenv(f"{ENV_PREFIX}DATA_FOLDER")

        if os.getenv(f"{ENV_PREFIX}MONGO_URL"):
            settings.mongo.connection_string = os.getenv(f"{ENV_PREFIX}MONGO_URL")

        if os.getenv(f"{ENV_PREFIX}CACHE_TIME"):
            settings.cache.cache_time = float(os.getenv(f"{ENV_PREFIX}CACHE_TIME"))
        if os.getenv(f"{ENV_PREFIX}CACHE_TIME_UNIT"):
            settings.cache.cache_time_unit = TimeUnit.parse(os.getenv(f"{ENV_PREFIX}CACHE_TIME_UNIT"))

        if os.getenv(f"{ENV_PREFIX}AUTO_SAVE"):
            settings.auto_save.enabled = os.getenv(f"{ENV_PREFIX}AUTO_SAVE").lower() in ("1", "true", "yes", "on")
        if os.getenv(f"{ENV_PREFIX}AUTO_SAVE_INTERVAL"):
            settings.auto_save.interval = float(os.getenv(f"{ENV_PREFIX}AUTO_SAVE_INTERVAL"))

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            settings.logging.level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL").upper()
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            settings.logging.file_path = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return settings

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to a JSON-compatible dictionary"""
        def plain(value):
            if isinstance(value, Enum):
                return value.value
            if isinstance(value, dict):
                return {k: plain(v) for k, v in value.items()}
            return value

        return {key: plain(value) for key, value in asdict(self).items()}

def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """Configure the ``entitystore`` logger hierarchy"""
    config = config or LoggingConfig()
    package_logger = logging.getLogger("entitystore")
    package_logger.setLevel(config.level)

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if config.file_path:
        Path(config.file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    package_logger.debug(f"Logging configured at level {config.level}")

# Global settings management
_current_settings: Optional[StorageSettings] = None

def set_settings(settings: Optional[StorageSettings]) -> None:
    """Set the global settings"""
    global _current_settings
    _current_settings = settings

def get_settings() -> StorageSettings:
    """Get the current global settings, reading the environment on first use"""
    global _current_settings

    if _current_settings is None:
        _current_settings = StorageSettings.from_environment()

    return _current_settings

__all__ = [
    "Environment", "BackendType", "CacheConfig", "AutoSaveConfig",
    "JSONBackendConfig", "MongoBackendConfig", "LoggingConfig", "StorageSettings",
    "configure_logging", "set_settings", "get_settings", "ENV_PREFIX"
]
