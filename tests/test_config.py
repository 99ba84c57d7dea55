"""Tests for settings loading and logging configuration."""

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest
import yaml

from entitystore import TimeUnit, get_settings, set_settings
from entitystore.config import (
    BackendType, Environment, LoggingConfig, StorageSettings, configure_logging
)

@pytest.fixture
def package_logger():
    """Restore the entitystore logger after a test reconfigures it"""
    logger = logging.getLogger("entitystore")
    level, handlers = logger.level, logger.handlers[:]
    yield logger
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)

@pytest.fixture
def global_settings():
    yield
    set_settings(None)

def test_defaults():
    settings = StorageSettings()

    assert settings.backend == BackendType.JSON
    assert settings.cache.cache_time is None
    assert settings.auto_save.enabled
    assert settings.auto_save.interval == 15
    assert settings.auto_save.unit == TimeUnit.MINUTES

def test_for_environment():
    testing = StorageSettings.for_environment(Environment.TESTING)
    production = StorageSettings.for_environment(Environment.PRODUCTION)

    assert not testing.auto_save.enabled
    assert testing.logging.level == "WARNING"
    assert production.logging.file_path is not None

def test_from_dict_parses_sections():
    settings = StorageSettings.from_dict({
        "environment": "production",
        "backend": "mongo",
        "tick_interval": 500,
        "tick_interval_unit": "MILLISECONDS",
        "cache": {"cache_time": 10, "cache_time_unit": "minutes"},
        "mongo": {"connection_string": "mongodb://db:27017/game", "unknown": 1},
    })

    assert settings.environment == Environment.PRODUCTION
    assert settings.backend == BackendType.MONGO
    assert settings.tick_interval == 500
    assert settings.tick_interval_unit == TimeUnit.MILLISECONDS
    assert settings.cache.cache_time == 10
    assert settings.cache.cache_time_unit == TimeUnit.MINUTES
    assert settings.mongo.connection_string == "mongodb://db:27017/game"
    assert not hasattr(settings.mongo, "unknown")

def test_from_json_file(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text(json.dumps({"json_file": {"folder": "/srv/data"}, "auto_save": {"interval": 5}}))

    settings = StorageSettings.from_file(path)

    assert settings.json_file.folder == "/srv/data"
    assert settings.auto_save.interval == 5

def test_from_yaml_file(tmp_path):
    path = tmp_path / "storage.yaml"
    path.write_text(yaml.safe_dump({
        "backend": "json",
        "auto_save": {"enabled": False, "unit": "seconds"},
        "logging": {"level": "ERROR"},
    }))

    settings = StorageSettings.from_file(path)

    assert not settings.auto_save.enabled
    assert settings.auto_save.unit == TimeUnit.SECONDS
    assert settings.logging.level == "ERROR"

def test_from_file_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        StorageSettings.from_file(tmp_path / "missing.yaml")

    ini = tmp_path / "storage.ini"
    ini.write_text("[storage]")
    with pytest.raises(ValueError):
        StorageSettings.from_file(ini)

def test_from_environment(monkeypatch):
    monkeypatch.setenv("ENTITYSTORE_ENV", "testing")
    monkeypatch.setenv("ENTITYSTORE_BACKEND", "MONGO")
    monkeypatch.setenv("ENTITYSTORE_MONGO_URL", "mongodb://env:27017/app")
    monkeypatch.setenv("ENTITYSTORE_CACHE_TIME", "30")
    monkeypatch.setenv("ENTITYSTORE_CACHE_TIME_UNIT", "seconds")
    monkeypatch.setenv("ENTITYSTORE_AUTO_SAVE", "yes")
    monkeypatch.setenv("ENTITYSTORE_LOG_LEVEL", "debug")

    settings = StorageSettings.from_environment()

    assert settings.environment == Environment.TESTING
    assert settings.backend == BackendType.MONGO
    assert settings.mongo.connection_string == "mongodb://env:27017/app"
    assert settings.cache.cache_time == 30
    assert settings.cache.cache_time_unit == TimeUnit.SECONDS
    assert settings.auto_save.enabled
    assert settings.logging.level == "DEBUG"

def test_to_dict_round_trips_through_from_dict():
    original = StorageSettings.from_dict({"backend": "mongo", "cache": {"cache_time": 3}})

    data = original.to_dict()
    json.dumps(data)

    assert data["backend"] == "mongo"
    assert data["cache"]["cache_time_unit"] == "minutes"
    assert StorageSettings.from_dict(data) == original

def test_global_settings(global_settings, monkeypatch):
    monkeypatch.setenv("ENTITYSTORE_DATA_FOLDER", "/tmp/from-env")
    set_settings(None)

    assert get_settings().json_file.folder == "/tmp/from-env"

    custom = StorageSettings(backend=BackendType.MONGO)
    set_settings(custom)
    assert get_settings() is custom

def test_configure_logging_with_file(tmp_path, package_logger):
    log_file = tmp_path / "logs" / "storage.log"

    configure_logging(LoggingConfig(level="INFO", file_path=str(log_file)))
    logging.getLogger("entitystore.persistence.service").info("hello from the service")

    assert package_logger.level == logging.INFO
    assert any(isinstance(h, RotatingFileHandler) for h in package_logger.handlers)
    for handler in package_logger.handlers:
        handler.flush()
    assert "hello from the service" in log_file.read_text()

def test_configure_logging_replaces_handlers(package_logger):
    configure_logging(LoggingConfig(level="WARNING"))
    configure_logging(LoggingConfig(level="WARNING"))

    assert len(package_logger.handlers) == 1
