import logging

from rich.logging import RichHandler

from sarasva.config import DEFAULT_DB_PATH, DEFAULT_USER, load_config
from sarasva.log import setup_logging


def test_load_config_defaults(monkeypatch):
    for var in ("SARASVA_DB", "SARASVA_USER", "SARASVA_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    config = load_config()
    assert config.db_path == DEFAULT_DB_PATH
    assert config.user_id == DEFAULT_USER
    assert config.log_level == "WARNING"


def test_load_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("SARASVA_DB", str(tmp_path / "x.db"))
    monkeypatch.setenv("SARASVA_USER", "alice")
    monkeypatch.setenv("SARASVA_LOG_LEVEL", "debug")
    config = load_config()
    assert config.db_path == str(tmp_path / "x.db")
    assert config.user_id == "alice"
    assert config.log_level == "DEBUG"


def test_setup_logging_installs_single_handler():
    logger = setup_logging("INFO")
    setup_logging("DEBUG")
    assert logger.name == "sarasva"
    assert logger.level == logging.DEBUG
    assert sum(isinstance(h, RichHandler) for h in logger.handlers) == 1
