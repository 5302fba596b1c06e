import os

from dotenv import load_dotenv
from pydantic import BaseModel


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    app_env: str = "development"
    database_url: str = "sqlite:///./scheduler.db"

    jwt_secret_key: str = ""
    jwt_algorithm: str = "HS256"
    jwt_leeway_seconds: int = 5
    static_tokens: list[str] = []

    cors_origins: list[str] = ["http://localhost:4200"]

    reject_duplicate_rule_days: bool = False
    booking_lookup_pad_minutes: int = 60


def load_settings() -> Settings:
    load_dotenv()

    return Settings(
        app_env=os.getenv("APP_ENV", "development"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./scheduler.db"),
        jwt_secret_key=os.getenv("JWT_HMAC_SECRET", "").strip(),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_leeway_seconds=int(os.getenv("JWT_LEEWAY_SECONDS", "5")),
        static_tokens=_get_list(os.getenv("STATIC_TOKENS")),
        cors_origins=_get_list(os.getenv("CORS_ORIGINS")) or ["http://localhost:4200"],
        reject_duplicate_rule_days=_get_bool(os.getenv("REJECT_DUPLICATE_RULE_DAYS"), default=False),
        booking_lookup_pad_minutes=int(os.getenv("BOOKING_LOOKUP_PAD_MINUTES", "60")),
    )


def validate_runtime_config(settings: Settings) -> None:
    if settings.app_env.lower() == "production" and not (settings.jwt_secret_key or settings.static_tokens):
        raise RuntimeError("JWT_HMAC_SECRET or STATIC_TOKENS must be set in production.")
