import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./booking.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ALLOW_ORIGINS = _get_list(os.getenv("CORS_ALLOW_ORIGINS"), ["http://localhost:5173"])
SEED_SAMPLE_DATA = _get_bool(os.getenv("SEED_SAMPLE_DATA"), default=False)

DEFAULT_MIN_NOTICE_MINUTES = _get_int(os.getenv("DEFAULT_MIN_NOTICE_MINUTES"), 240)
DEFAULT_MAX_ADVANCE_DAYS = _get_int(os.getenv("DEFAULT_MAX_ADVANCE_DAYS"), 30)
DEFAULT_BUFFER_MINUTES = _get_int(os.getenv("DEFAULT_BUFFER_MINUTES"), 10)
DEFAULT_SLOT_INTERVAL_MINUTES = _get_int(os.getenv("DEFAULT_SLOT_INTERVAL_MINUTES"), 60)

def validate_runtime_config() -> None:
    if DEFAULT_MIN_NOTICE_MINUTES < 0 or DEFAULT_MAX_ADVANCE_DAYS < 0 or DEFAULT_BUFFER_MINUTES < 0:
        raise RuntimeError("Booking setting defaults must be non-negative.")
    if DEFAULT_SLOT_INTERVAL_MINUTES <= 0:
        raise RuntimeError("DEFAULT_SLOT_INTERVAL_MINUTES must be greater than zero.")
    if APP_ENV.lower() == "production" and DATABASE_URL.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must point at a server database in production.")
