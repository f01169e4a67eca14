# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_ENV = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    validate_by_name=True,
)

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_PLACEHOLDER_SECRETS = frozenset({"", "dev", "development", "test", "secret", "secretkey"})


def _flag(value: str | bool) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


class DatabaseConfig(BaseSettings):
    model_config = _ENV

    url: str = Field("sqlite:///authapp.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")


class SessionConfig(BaseSettings):
    model_config = _ENV

    ttl_seconds: int = Field(3600, ge=1, alias="SESSION_TTL")
    cookie_name: str = Field("session", min_length=1, alias="SESSION_COOKIE_NAME")

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.ttl_seconds)


class UploadConfig(BaseSettings):
    model_config = _ENV

    directory: Path = Field(Path("instance/uploads"), alias="UPLOAD_DIR")
    max_bytes: int = Field(5 * 1024 * 1024, ge=1, alias="UPLOAD_MAX_BYTES")
    allowed_extensions: Annotated[list[str], NoDecode] = Field(
        ["png", "jpg", "jpeg", "gif", "webp"], alias="UPLOAD_ALLOWED_EXTENSIONS"
    )

    @field_validator("allowed_extensions", mode="before")
    @classmethod
    def _split_extensions(cls, value: str | list[str]) -> list[str]:
        items = value.split(",") if isinstance(value, str) else value
        return [item.strip().lower().lstrip(".") for item in items if item.strip()]


class SecurityConfig(BaseSettings):
    model_config = _ENV

    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Lax", alias="COOKIE_SAMESITE")
    enable_csrf: bool = Field(False, alias="ENABLE_CSRF")
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    # fallbacks for endpoints that do not pass their own numbers
    rate_limit_requests: int = Field(10, ge=1, alias="RL_LIMIT")
    rate_limit_window: float = Field(60.0, gt=0, alias="RL_WINDOW")

    @field_validator(
        "cookie_secure", "enable_csrf", "enable_hsts", "enable_rate_limit", mode="before"
    )
    @classmethod
    def _parse_flags(cls, value: str | bool) -> bool:
        return _flag(value)

    @field_validator("cookie_samesite")
    @classmethod
    def _check_samesite(cls, value: str) -> str:
        value = value.strip().capitalize()
        if value not in ("Lax", "Strict", "None"):
            raise ValueError("COOKIE_SAMESITE must be Lax, Strict or None")
        return value


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    port: int = Field(3000, ge=1, le=65535, alias="PORT")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")
    password_hasher: str = Field("argon2", alias="PASSWORD_HASHER")

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    uploads: UploadConfig = Field(default_factory=UploadConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug(cls, value: str | bool) -> bool:
        return _flag(value)

    @field_validator("password_hasher")
    @classmethod
    def _check_hasher(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("argon2", "werkzeug"):
            raise ValueError("PASSWORD_HASHER must be 'argon2' or 'werkzeug'")
        return value

    @model_validator(mode="after")
    def _guard_production(self) -> "AppConfig":
        if not self.is_production():
            return self

        # runs before logging is configured, so stderr it is
        if self.secret_key.strip().lower() in _PLACEHOLDER_SECRETS:
            print(
                "FATAL: SECRET_KEY is a placeholder value while APP_ENV is production.\n"
                "Set SECRET_KEY to a long random string, for example the output of\n"
                "  python -c \"import secrets; print(secrets.token_urlsafe(32))\"",
                file=sys.stderr,
            )
            sys.exit(1)

        disabled = [
            name
            for name, enabled in (
                ("ENABLE_CSRF", self.security.enable_csrf),
                ("COOKIE_SECURE", self.security.cookie_secure),
                ("ENABLE_HSTS", self.security.enable_hsts),
            )
            if not enabled
        ]
        if disabled:
            print(
                f"WARNING: running in production with {', '.join(disabled)} turned off",
                file=sys.stderr,
            )
        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = ["AppConfig", "load_config"]
