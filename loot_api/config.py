from __future__ import annotations

import logging
import os
from dataclasses import dataclass


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # General
    environment: str
    log_level: str

    # Tracking
    max_recent_events: int
    dedup_window_ms: float
    dedup_horizon_ms: float

    # Catalog JSON ({"items": [...], "event_items": [...]}); empty means no catalog loaded
    catalog_path: str

    # Discord
    loot_webhook_url: str
    notifications_enabled: bool
    notify_own_only: bool

    selftest_on_startup: bool

    @property
    def dedup_window_seconds(self) -> float:
        return self.dedup_window_ms / 1000.0

    @property
    def dedup_horizon_seconds(self) -> float:
        return self.dedup_horizon_ms / 1000.0

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            environment=(os.getenv("ENVIRONMENT") or os.getenv("ENV") or "stage").strip() or "stage",
            log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper() or "INFO",
            max_recent_events=max(1, _get_int("LOOT_MAX_RECENT_EVENTS", 100)),
            dedup_window_ms=_get_float("LOOT_DEDUP_WINDOW_MS", 500.0),
            dedup_horizon_ms=_get_float("LOOT_DEDUP_HORIZON_MS", 3000.0),
            catalog_path=(os.getenv("LOOT_CATALOG_PATH") or "").strip(),
            loot_webhook_url=(os.getenv("LOOT_WEBHOOK_URL") or "").strip(),
            notifications_enabled=_get_bool("LOOT_NOTIFICATIONS_ENABLED", False),
            notify_own_only=_get_bool("LOOT_NOTIFY_OWN_ONLY", True),
            selftest_on_startup=_get_bool("LOOT_SELFTEST_ON_STARTUP", True),
        )


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("lootview").setLevel(level)
