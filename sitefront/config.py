from dataclasses import dataclass
from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ── Known insecure defaults (must never be used in production) ──
_INSECURE_PASSWORDS = {"postgres", ""}


class Settings(BaseSettings):
    APP_NAME: str = "SiteFront"
    APP_ENV: str = "development"
    LOG_LEVEL: str = ""                    # empty = INFO in production, DEBUG otherwise
    API_V1_STR: str = "/api/v1"

    # Public URL of this service (used to build blob / upload URLs)
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # CORS
    BACKEND_CORS_ORIGINS: str = ""

    # ── Tenant resolution ──
    # Comma-separated list, e.g. "example.com,sites.example.net"
    WILDCARD_DOMAINS: str = ""
    # Optional remote tenant-config read service; empty = read local registry
    SITE_CONFIG_BASE_URL: str = ""
    SITE_CONFIG_CACHE_TTL: int = 120       # seconds
    SITE_CONFIG_REMOTE_TIMEOUT: float = 5.0

    # ── Domain provider (Vercel) ──
    VERCEL_API_URL: str = "https://api.vercel.com"
    VERCEL_ACCESS_TOKEN: str = ""
    VERCEL_PROJECT_ID: str = ""
    VERCEL_TEAM_ID: str = ""
    VERCEL_TEAM_SLUG: str = ""
    PROVIDER_TIMEOUT_SECONDS: float = 10.0
    PROVIDER_RETRY_ATTEMPTS: int = 1       # 1 = no retries
    DOMAIN_RECONCILE_INTERVAL_SECONDS: int = 900

    # ── Admin API ──
    ADMIN_SERVICE_TOKEN: str = ""

    # Database (DATABASE_URL, when set, wins over the POSTGRES_* parts)
    DATABASE_URL: str = ""
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "sitefront"

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    SITE_CACHE_REDIS_DB: int = 1

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # File Storage (favicons)
    UPLOAD_DIR: str = "./uploads"
    MAX_FILE_SIZE: int = 1 * 1024 * 1024  # 1MB

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @model_validator(mode="after")
    def _validate_production_security(self) -> "Settings":
        """Block startup if critical secrets are insecure in production / staging."""
        if self.APP_ENV in ("production", "staging"):
            if not self.DATABASE_URL and self.POSTGRES_PASSWORD in _INSECURE_PASSWORDS:
                raise ValueError(
                    "POSTGRES_PASSWORD is set to default 'postgres'. "
                    "Set a strong password in .env or environment."
                )
            if not self.ADMIN_SERVICE_TOKEN:
                raise ValueError(
                    "ADMIN_SERVICE_TOKEN is empty. The admin API would be unauthenticated; "
                    "set ADMIN_SERVICE_TOKEN in .env or environment."
                )
        return self

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"
        )

    @property
    def SITE_CACHE_REDIS_URL(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.SITE_CACHE_REDIS_DB}"

    @property
    def wildcard_domains(self) -> List[str]:
        return parse_wildcard_domains(self.WILDCARD_DOMAINS)

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_staging(self) -> bool:
        return self.APP_ENV == "staging"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"


def parse_wildcard_domains(raw: Optional[str]) -> List[str]:
    """Split the comma-separated root list, keeping order and dropping blanks/duplicates."""
    if not raw:
        return []
    roots: List[str] = []
    for part in raw.split(","):
        root = part.strip().lower().rstrip(".")
        if root and root not in roots:
            roots.append(root)
    return roots


# ═══════════════════════════════════════════
#  Explicit config objects handed to core services
# ═══════════════════════════════════════════

@dataclass(frozen=True)
class ResolverConfig:
    wildcard_roots: tuple = ()


@dataclass(frozen=True)
class ProviderSettings:
    api_url: str = "https://api.vercel.com"
    token: str = ""
    project_id: str = ""
    team_id: str = ""
    team_slug: str = ""
    timeout: float = 10.0

    def __repr__(self) -> str:
        # never print the token
        return (
            f"ProviderSettings(api_url={self.api_url!r}, project_id={self.project_id!r}, "
            f"team_id={self.team_id!r}, team_slug={self.team_slug!r}, timeout={self.timeout})"
        )


def resolver_config_from(s: Settings) -> ResolverConfig:
    return ResolverConfig(wildcard_roots=tuple(s.wildcard_domains))


def provider_settings_from(s: Settings) -> ProviderSettings:
    return ProviderSettings(
        api_url=s.VERCEL_API_URL.rstrip("/"),
        token=s.VERCEL_ACCESS_TOKEN,
        project_id=s.VERCEL_PROJECT_ID,
        team_id=s.VERCEL_TEAM_ID,
        team_slug=s.VERCEL_TEAM_SLUG,
        timeout=s.PROVIDER_TIMEOUT_SECONDS,
    )


settings = Settings()
