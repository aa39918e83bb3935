from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from tasklens.domain.enums import DeletePolicy


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"
    log_dir: str = "logs"
    recurrence_scan_interval_s: int = 3600
    delete_policy: DeletePolicy = DeletePolicy.CASCADE

    @classmethod
    def from_env(cls) -> "Settings":
        database_url = os.getenv("DATABASE_URL", "").strip()
        if not database_url:
            raise RuntimeError("DATABASE_URL is not set. Create a .env file with your connection string.")

        policy = os.getenv("DELETE_POLICY", DeletePolicy.CASCADE.value).strip().lower()
        try:
            delete_policy = DeletePolicy(policy)
        except ValueError:
            raise RuntimeError(f"DELETE_POLICY must be 'cascade' or 'orphan', got {policy!r}") from None

        return cls(
            database_url=database_url,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=os.getenv("LOG_DIR", "logs"),
            recurrence_scan_interval_s=int(os.getenv("RECURRENCE_SCAN_INTERVAL_S", "3600")),
            delete_policy=delete_policy,
        )


load_env()

SETTINGS = Settings.from_env()
