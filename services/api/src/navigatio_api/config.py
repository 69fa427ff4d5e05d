"""Environment configuration helpers."""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .origin_policy import OriginPolicy, default_origin_policy

logger = logging.getLogger(__name__)


class Environment(str, enum.Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @classmethod
    def from_env(cls) -> "Environment":
        """Only an explicit ``production`` value selects production."""
        value = os.getenv("NODE_ENV") or os.getenv("APP_ENV") or ""
        if value.strip().lower() == cls.PRODUCTION.value:
            return cls.PRODUCTION
        return cls.DEVELOPMENT


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Invalid %s=%r, using default %s", name, value, default)
        return default


def _str_env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip() or default


def extra_cors_origins() -> tuple[str, ...]:
    value = os.getenv("CORS_ORIGINS", "")
    return tuple(v.strip() for v in value.split(",") if v.strip())


@dataclass(frozen=True)
class ServerConfig:
    """Process-wide settings, resolved once at startup."""

    environment: Environment = Environment.DEVELOPMENT
    host: str = "0.0.0.0"
    port: int = 5000
    mongodb_uri: str = ""
    jwt_secret: str = ""
    jwt_expire: str = "30d"
    ai_api_key: str = ""
    uploads_dir: Path = Path("uploads")
    frontend_build_dir: Path = Path("../frontend/build")
    dev_redirect_origin: str = "http://navigatioasia.com"
    max_request_bytes: int = 102_400
    cors_max_age: int = 86_400
    origin_policy: OriginPolicy = field(default_factory=default_origin_policy)

    @property
    def is_production(self) -> bool:
        return self.environment is Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment is Environment.DEVELOPMENT

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Build the configuration from the current environment."""
        environment = Environment.from_env()
        config = cls(
            environment=environment,
            host=_str_env("HOST", "0.0.0.0"),
            port=_int_env("PORT", 5000),
            mongodb_uri=_str_env("MONGODB_URI"),
            jwt_secret=_str_env("JWT_SECRET"),
            jwt_expire=_str_env("JWT_EXPIRE", "30d"),
            ai_api_key=_str_env("GOOGLE_AI_API_KEY"),
            uploads_dir=Path(_str_env("UPLOADS_DIR", "uploads")),
            frontend_build_dir=Path(
                _str_env("FRONTEND_BUILD_DIR", "../frontend/build")
            ),
            dev_redirect_origin=_str_env(
                "DEV_REDIRECT_ORIGIN", "http://navigatioasia.com"
            ).rstrip("/"),
            max_request_bytes=_int_env("MAX_REQUEST_BYTES", 102_400),
            origin_policy=default_origin_policy().with_origins(extra_cors_origins()),
        )
        if not config.jwt_secret:
            logger.warning("JWT_SECRET is not set; token signing will fail")
        if not config.ai_api_key:
            logger.info("GOOGLE_AI_API_KEY is not set")
        return config
