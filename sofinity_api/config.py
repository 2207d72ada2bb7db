from __future__ import annotations

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from sofinity_api.errors import ConfigurationError

load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

ONEMIL_PROJECT_ID = "defababe-004b-4c63-9ff1-311540b0a3c9"
# used when the contests table is empty; this row is never created here
FALLBACK_CONTEST_ID = "00000000-0000-0000-0000-000000000002"


class Settings(BaseModel):
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    project_id: str = ONEMIL_PROJECT_ID
    fallback_contest_id: str = FALLBACK_CONTEST_ID
    api_token: Optional[str] = None
    cors_allow_origins: str = "*"
    store_timeout_s: float = 20.0
    log_level: str = "INFO"
    # env values that could not be parsed; reported by require_store()
    invalid: List[str] = []

    @classmethod
    def from_env(cls) -> "Settings":
        invalid: List[str] = []
        raw_timeout = os.environ.get("STORE_TIMEOUT_S", "20")
        try:
            store_timeout_s = float(raw_timeout)
        except ValueError:
            invalid.append(f"STORE_TIMEOUT_S={raw_timeout!r} is not a number")
            store_timeout_s = 20.0
        return cls(
            supabase_url=os.environ.get("SUPABASE_URL") or None,
            supabase_service_role_key=os.environ.get("SUPABASE_SERVICE_ROLE_KEY") or None,
            project_id=os.environ.get("ONEMIL_PROJECT_ID") or ONEMIL_PROJECT_ID,
            fallback_contest_id=os.environ.get("FALLBACK_CONTEST_ID") or FALLBACK_CONTEST_ID,
            api_token=os.environ.get("API_TOKEN") or None,
            cors_allow_origins=os.environ.get("CORS_ALLOW_ORIGINS", "*"),
            store_timeout_s=store_timeout_s,
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            invalid=invalid,
        )

    @property
    def store_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    def require_store(self) -> None:
        """Fail fast, before any store round trip, when credentials are absent."""
        if self.invalid:
            raise ConfigurationError("Invalid configuration: " + "; ".join(self.invalid))
        if not self.store_configured:
            raise ConfigurationError("Missing Supabase configuration")

    @property
    def allow_origin(self) -> str:
        # Access-Control-Allow-Origin carries a single value
        origins = [o.strip() for o in (self.cors_allow_origins or "").split(",") if o.strip()]
        return origins[0] if origins else "*"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
