"""
Runtime settings read from the environment.

Call load_env() first to pick up a local .env file.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .assembler import DEFAULT_PAGED_ITEMS, MINIMUM_ACCEPTABLE, FeedPolicy
from .errors import CallerContractError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise CallerContractError(f"{name} must be an integer, got {raw!r}")


def _log_level_env(name: str, default: str) -> str:
    level = (os.getenv(name) or default).strip().upper()
    if level not in LOG_LEVELS:
        raise CallerContractError(f"{name} must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
    return level


@dataclass(frozen=True)
class Settings:
    db_path: Path = Path("data/directory.db")
    search_url: Optional[str] = None
    items_per_page: int = DEFAULT_PAGED_ITEMS
    minimum_acceptable: int = MINIMUM_ACCEPTABLE
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            db_path=Path(os.getenv("RELATEDFEED_DB_PATH", "data/directory.db")),
            search_url=os.getenv("RELATEDFEED_SEARCH_URL") or None,
            items_per_page=_int_env("RELATEDFEED_ITEMS_PER_PAGE", DEFAULT_PAGED_ITEMS),
            minimum_acceptable=_int_env("RELATEDFEED_MINIMUM_ACCEPTABLE", MINIMUM_ACCEPTABLE),
            log_level=_log_level_env("RELATEDFEED_LOG_LEVEL", "INFO"),
            log_dir=Path(os.getenv("RELATEDFEED_LOG_DIR", "logs")),
        )

    def policy(self) -> FeedPolicy:
        return FeedPolicy(default_quota=self.items_per_page, minimum_acceptable=self.minimum_acceptable)
