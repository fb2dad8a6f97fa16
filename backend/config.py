import os
from dataclasses import dataclass, field

DEFAULT_FRONTEND_ORIGIN = "http://localhost:3000"


def _split_origins(raw: str | None) -> list[str]:
    origins = [DEFAULT_FRONTEND_ORIGIN]
    for value in (raw or "").split(","):
        value = value.strip()
        if value and value not in origins:
            origins.append(value)
    return origins


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./budget_tracker.db"
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    token_expire_minutes: int = 24 * 60
    frontend_origins: list[str] = field(default_factory=lambda: [DEFAULT_FRONTEND_ORIGIN])
    frontend_origin_regex: str | None = r"https://budget-tracker-frontend.*\.vercel\.app"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./budget_tracker.db"),
        jwt_secret=os.getenv("JWT_SECRET", "change-me"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        token_expire_minutes=_int_from_env("TOKEN_EXPIRE_MINUTES", 24 * 60),
        frontend_origins=_split_origins(os.getenv("FRONTEND_ORIGINS")),
        frontend_origin_regex=os.getenv(
            "FRONTEND_ORIGIN_REGEX", r"https://budget-tracker-frontend.*\.vercel\.app"
        )
        or None,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_int_from_env("PORT", 5000),
    )
