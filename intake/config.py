"""
Environment-driven settings for the intake service.

Values come from the process environment; a local ``.env`` file is loaded first
for development.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MAX_UPLOAD_BYTES = 16 * 1024 * 1024  # 16MB


def _default_db_path() -> str:
    # In Docker, use /app/data/scholarships.db; locally, ./scholarships.db
    if os.path.exists("/app"):
        return os.path.join("/app/data", "scholarships.db")
    return os.path.join(os.getcwd(), "scholarships.db")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class IntakeSettings:
    storage_backend: str = "sqlite"
    db_path: str = "scholarships.db"
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    lenient_field_inference: bool = True
    suitability_email_enabled: bool = True
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    app_url: str = "http://localhost:5000"


def get_settings() -> IntakeSettings:
    """Read settings from the environment (re-read on every call so tests can patch env)."""
    try:
        max_upload = int(os.environ.get("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES))
    except ValueError:
        max_upload = DEFAULT_MAX_UPLOAD_BYTES
    return IntakeSettings(
        storage_backend=os.environ.get("STORAGE_BACKEND", "sqlite").strip().lower(),
        db_path=os.environ.get("DB_PATH") or _default_db_path(),
        supabase_url=os.environ.get("SUPABASE_URL"),
        supabase_service_key=os.environ.get("SUPABASE_SERVICE_ROLE_KEY"),
        lenient_field_inference=_env_flag("LENIENT_FIELD_INFERENCE", True),
        suitability_email_enabled=_env_flag("SUITABILITY_EMAIL_ENABLED", True),
        max_upload_bytes=max_upload,
        app_url=os.environ.get("APP_URL", "http://localhost:5000"),
    )
