import os
from dotenv import load_dotenv

load_dotenv()

PLACEHOLDER_MARKERS = ("your-", "your_", "placeholder", "example.com")


def _as_bool(value, default=False):
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # ------------------------
    # Database
    # ------------------------
    DATABASE_URL = os.getenv("DATABASE_URL", "")

    # ------------------------
    # Auth
    # ------------------------
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me-villa-admin-secret")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@villagemachaan.com")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

    # ------------------------
    # Integrations (status only)
    # ------------------------
    RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID")
    EMAILJS_SERVICE_ID = os.getenv("EMAILJS_SERVICE_ID")
    EMAILJS_TEMPLATE_ID = os.getenv("EMAILJS_TEMPLATE_ID")
    EMAILJS_PUBLIC_KEY = os.getenv("EMAILJS_PUBLIC_KEY")

    # ------------------------
    # Runtime
    # ------------------------
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DASHBOARD_POLL_SECONDS = int(os.getenv("DASHBOARD_POLL_SECONDS", "60"))
    CACHE_SWEEP_SECONDS = int(os.getenv("CACHE_SWEEP_SECONDS", "3600"))
    CACHE_DEFAULT_TTL = int(os.getenv("CACHE_DEFAULT_TTL", "300"))
    CACHE_MAX_SIZE = int(os.getenv("CACHE_MAX_SIZE", "100"))
    SEED_ON_STARTUP = _as_bool(os.getenv("SEED_ON_STARTUP"))


def is_placeholder(value) -> bool:
    if not value:
        return True
    lowered = value.lower()
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


def is_database_configured(url=None) -> bool:
    return not is_placeholder(settings.DATABASE_URL if url is None else url)


settings = Settings()
