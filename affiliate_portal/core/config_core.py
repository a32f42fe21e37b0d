# -*- coding: utf-8 -*-
# affiliate_portal/core/config_core.py
# =============================================================================
# Purpose:
#   • Single configuration module of the affiliate portal backend
#     (FastAPI + SQLAlchemy async).
#   • The one source of every tunable: database, public codes, click tracking,
#     logging.
#
# Invariants:
#   1) Public codes are minted from (id, created_at) and resalted with
#      CODE_RESALT_PRIME on conflict; at most CODE_MAX_ATTEMPTS candidates.
#   2) Money is rounded HALF_UP in the service layer only; its scale is fixed
#      in utils_core.
#   3) The click redirect always appends CLICK_ID_PARAM to the destination.
#
# Safeguards:
#   • configure_decimal_context() fixes Decimal precision once per process.
#   • initialize_runtime() validates the DSN and prints soft warnings about
#     missing secrets instead of failing the import.
# =============================================================================

from __future__ import annotations

from decimal import ROUND_HALF_UP, getcontext
from functools import lru_cache
from typing import Annotated, Dict, Iterable, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


# =============================================================================
# Local helpers (no I/O)
# =============================================================================


def _parse_csv(value: object) -> List[str]:
    """Turns a CSV string 'a,b,c' into ['a', 'b', 'c'] (whitespace stripped)."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(x).strip() for x in value if str(x).strip()]
    s = str(value).strip()
    if not s:
        return []
    return [item.strip() for item in s.split(",") if item.strip()]


def _unique(items: Iterable[str]) -> List[str]:
    """Drops repeats while keeping the order of first appearance."""
    out: List[str] = []
    for item in items:
        if item not in out:
            out.append(item)
    return out


# =============================================================================
# Field descriptions (shown in Swagger and in `.env` reviews)
# =============================================================================


class _Doc:
    # Application
    PROJECT_NAME = "Project name (Swagger title, logs, /health)."
    ENV = "Environment: production/dev/local/test (normalized to prod/dev/local/test)."
    DEBUG = "Verbose logs and SQL echo (dev/local only)."
    APP_VERSION = "Application version (reported by /health)."
    APP_HOST = "uvicorn bind address."
    APP_PORT = "uvicorn port."
    APP_RELOAD = "Hot reload (development)."
    API_PREFIX = "REST prefix, for example /api."
    DOCS_URL = "Swagger UI path."
    OPENAPI_URL = "OpenAPI JSON path."
    CORS_ORIGINS = "Allowed origins (CSV)."

    # Database
    DATABASE_URL = "PostgreSQL DSN. Rewritten to postgresql+asyncpg:// automatically."
    DB_POOL_SIZE = "SQLAlchemy pool size."
    DB_MAX_OVERFLOW = "Extra connections at peak."

    # Codes
    CODE_MAX_ATTEMPTS = "How many code candidates to try before giving up."
    CODE_RESALT_PRIME = "Offset multiplier for resalted code candidates."

    # Tracking
    CLICK_ID_PARAM = "Query parameter carrying the click id to the landing page."
    SUB_ID_PARAMS = "Query parameters captured as click sub-ids (CSV)."
    SUB_ID_MAX_LENGTH = "Longest sub-id value kept."
    USER_AGENT_MAX_LENGTH = "Longest user-agent kept."
    DEFAULT_LANDING_URL = "Destination when neither campaign nor brand define one."

    # Logging / secrets
    LOG_LEVEL = "Root log level (INFO/DEBUG/WARNING/ERROR)."
    LOG_JSON = "Force JSON logs outside prod."
    APP_SECRET = "Application secret; masked in logs."


# =============================================================================
# Application settings
# =============================================================================


class Settings(BaseSettings):
    """
    Environment-backed settings of the portal backend.

    Notes:
      • Secrets come from the environment only.
      • Code tunables are validated so a typo cannot ship a generator that
        never resalts.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # --------------------------- APPLICATION ---------------------------------
    PROJECT_NAME: str = Field("Affiliate Portal", description=_Doc.PROJECT_NAME)
    ENV: str = Field("production", description=_Doc.ENV)
    DEBUG: bool = Field(False, description=_Doc.DEBUG)
    APP_VERSION: str = Field("1.0.0", description=_Doc.APP_VERSION)

    APP_HOST: str = Field("0.0.0.0", description=_Doc.APP_HOST)
    APP_PORT: int = Field(8000, description=_Doc.APP_PORT)
    APP_RELOAD: bool = Field(False, description=_Doc.APP_RELOAD)

    API_PREFIX: str = Field("", description=_Doc.API_PREFIX)
    DOCS_URL: str = Field("/docs", description=_Doc.DOCS_URL)
    OPENAPI_URL: str = Field("/openapi.json", description=_Doc.OPENAPI_URL)

    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description=_Doc.CORS_ORIGINS,
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _v_cors_origins(cls, value: object) -> List[str]:
        return _unique(_parse_csv(value))

    # ----------------------------- DATABASE ----------------------------------
    DATABASE_URL: Optional[str] = Field(None, description=_Doc.DATABASE_URL)
    DB_POOL_SIZE: int = Field(10, description=_Doc.DB_POOL_SIZE)
    DB_MAX_OVERFLOW: int = Field(10, description=_Doc.DB_MAX_OVERFLOW)

    # ------------------------------ CODES ------------------------------------
    CODE_MAX_ATTEMPTS: int = Field(5, description=_Doc.CODE_MAX_ATTEMPTS)
    CODE_RESALT_PRIME: int = Field(2**61 - 1, description=_Doc.CODE_RESALT_PRIME)

    @field_validator("CODE_MAX_ATTEMPTS")
    @classmethod
    def _v_code_attempts(cls, value: int) -> int:
        if not 1 <= value <= 50:
            raise ValueError("CODE_MAX_ATTEMPTS must be within 1..50")
        return value

    @field_validator("CODE_RESALT_PRIME")
    @classmethod
    def _v_code_prime(cls, value: int) -> int:
        if value <= 1:
            raise ValueError("CODE_RESALT_PRIME must be greater than 1")
        return value

    # ----------------------------- TRACKING ----------------------------------
    CLICK_ID_PARAM: str = Field("afp_click", description=_Doc.CLICK_ID_PARAM)
    SUB_ID_PARAMS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["sub1", "sub2", "sub3", "sub4", "sub5"],
        description=_Doc.SUB_ID_PARAMS,
    )
    SUB_ID_MAX_LENGTH: int = Field(255, description=_Doc.SUB_ID_MAX_LENGTH)
    USER_AGENT_MAX_LENGTH: int = Field(1024, description=_Doc.USER_AGENT_MAX_LENGTH)
    DEFAULT_LANDING_URL: str = Field(
        "http://localhost:3000/",
        description=_Doc.DEFAULT_LANDING_URL,
    )

    @field_validator("SUB_ID_PARAMS", mode="before")
    @classmethod
    def _v_sub_id_params(cls, value: object) -> List[str]:
        return _unique(_parse_csv(value))

    # -------------------------- LOGGING / SECRETS ----------------------------
    LOG_LEVEL: str = Field("INFO", description=_Doc.LOG_LEVEL)
    LOG_JSON: bool = Field(False, description=_Doc.LOG_JSON)
    APP_SECRET: Optional[str] = Field(None, description=_Doc.APP_SECRET)

    # =========================== Convenience =================================

    @property
    def env_normalized(self) -> str:
        """Normalizes ENV to one of: prod/dev/local/test."""
        value = (self.ENV or "").strip().lower()
        if value.startswith("prod"):
            return "prod"
        if value.startswith("dev"):
            return "dev"
        if value.startswith("loc"):
            return "local"
        if value.startswith("test"):
            return "test"
        return "prod"

    @property
    def is_prod(self) -> bool:
        return self.env_normalized == "prod"

    def database_url_asyncpg(self) -> str:
        """
        DSN for SQLAlchemy async:
          postgres://   → postgresql+asyncpg://
          postgresql:// → postgresql+asyncpg:// when no driver is named.
        Other async DSNs (sqlite+aiosqlite://) pass through untouched.
        """
        if not self.DATABASE_URL:
            raise RuntimeError("DATABASE_URL is not set (a PostgreSQL DSN is required).")
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    def configure_decimal_context(self) -> None:
        """Enough precision for money maths; HALF_UP as the process default."""
        ctx = getcontext()
        ctx.prec = 28
        ctx.rounding = ROUND_HALF_UP

    def assert_required_secrets(self) -> None:
        """Soft self-check: warns, never raises."""
        if not self.DATABASE_URL and self.env_normalized != "test":
            print("[WARN] DATABASE_URL is not set; the database will be unavailable.")
        if self.is_prod and not self.APP_SECRET:
            print("[WARN] APP_SECRET is not set in production.")

    def debug_dump(self) -> Dict[str, str]:
        """Secret-free summary for /health and startup logs."""
        return {
            "env": self.env_normalized,
            "projectName": self.PROJECT_NAME,
            "version": self.APP_VERSION,
            "apiPrefix": self.API_PREFIX,
            "dbUrlSet": "yes" if self.DATABASE_URL else "no",
            "codeMaxAttempts": str(self.CODE_MAX_ATTEMPTS),
        }

    def initialize_runtime(self) -> None:
        """
        Process start hook:
          • validate DSN shape,
          • configure Decimal,
          • soft secret check.
        """
        if self.DATABASE_URL:
            _ = self.database_url_asyncpg()
        self.configure_decimal_context()
        self.assert_required_secrets()


# =============================================================================
# Process-wide settings
# =============================================================================


@lru_cache()
def get_settings() -> Settings:
    """Builds and caches Settings, running initialize_runtime() once."""
    settings_obj = Settings()
    settings_obj.initialize_runtime()
    return settings_obj


settings: Settings = get_settings()

__all__ = ["Settings", "get_settings", "settings"]
