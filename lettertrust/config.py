"""
Environment-driven settings.

Read once per call to get_settings(); nothing here is cached in module state,
so tests can monkeypatch the environment freely.
"""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

SUPPORTED_PHONE_LOCALES = ("AU", "US", "UK")


@dataclass(frozen=True)
class Settings:
    phone_locale: str
    diff_max_cells: int
    engine_version: str
    alert_webhook_url: Optional[str]
    audit_log_path: str
    log_level: str


def get_settings() -> Settings:
    locale = os.getenv("LETTERTRUST_PHONE_LOCALE", "AU").upper()
    if locale not in SUPPORTED_PHONE_LOCALES:
        raise ValueError(f"Unsupported phone locale: {locale}")

    return Settings(
        phone_locale=locale,
        diff_max_cells=int(os.getenv("LETTERTRUST_DIFF_MAX_CELLS", "4000000")),
        engine_version=os.getenv("LETTERTRUST_ENGINE_VERSION", "lettertrust-1.0.0"),
        alert_webhook_url=os.getenv("LETTERTRUST_ALERT_WEBHOOK_URL") or None,
        audit_log_path=os.getenv("LETTERTRUST_AUDIT_LOG", "audit.log"),
        log_level=os.getenv("LETTERTRUST_LOG_LEVEL", "INFO").upper(),
    )
