"""Runtime configuration read from the process environment."""

from dataclasses import dataclass
from os import getenv
from pathlib import Path
from typing import Optional

DEFAULT_EMAIL_FROM = "Togetai <connect@togetai.com>"
DEFAULT_DATA_DIR = Path("data")

STORE_BACKEND_FILE = "file"
STORE_BACKEND_DATABASE = "database"


def _flag(name: str, default: str = "false") -> bool:
    return getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Settings snapshot taken once at startup."""
    debug: bool = False
    port: int = 3000
    store_backend: str = STORE_BACKEND_FILE
    data_dir: Path = DEFAULT_DATA_DIR
    database_url: Optional[str] = None
    db_create_all: bool = False
    resend_api_key: Optional[str] = None
    email_from: str = DEFAULT_EMAIL_FROM
    admin_token: Optional[str] = None

    @property
    def feedback_file(self) -> Path:
        return self.data_dir / "feedback.json"


def load_settings() -> Settings:
    """Build settings from environment variables.

    Missing optional credentials are left as ``None`` so the features that
    need them can degrade instead of failing startup.
    """
    debug = _flag("APP_DEBUG")
    return Settings(
        debug=debug,
        port=int(getenv("PORT", "3000")),
        store_backend=getenv("STORE_BACKEND", STORE_BACKEND_FILE).strip().lower(),
        data_dir=Path(getenv("DATA_DIR") or DEFAULT_DATA_DIR),
        database_url=getenv("DATABASE_URL") or None,
        db_create_all=_flag("DB_CREATE_ALL", "true" if debug else "false"),
        resend_api_key=getenv("RESEND_API_KEY") or None,
        email_from=getenv("EMAIL_FROM") or DEFAULT_EMAIL_FROM,
        admin_token=getenv("ADMIN_TOKEN") or None,
    )
