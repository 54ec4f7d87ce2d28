"""Runtime configuration from the environment (and a local .env file)."""
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DB_PATH = str(Path.home() / ".sarasva" / "sarasva.db")
DEFAULT_USER = "local"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Config:
    db_path: str = DEFAULT_DB_PATH
    user_id: str = DEFAULT_USER
    log_level: str = DEFAULT_LOG_LEVEL


def load_config() -> Config:
    load_dotenv()
    return Config(
        db_path=os.environ.get("SARASVA_DB", DEFAULT_DB_PATH),
        user_id=os.environ.get("SARASVA_USER", DEFAULT_USER),
        log_level=os.environ.get("SARASVA_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )
