# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_INSECURE_SECRETS = ("dev", "development", "test", "change-me", "")

_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    validate_by_name=True,
)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///userauth.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _SECTION_CONFIG


class TokenConfig(BaseSettings):
    # HS256 takes a shared secret; RS256 takes a PEM private key here and the
    # matching public key in ACCESS_TOKEN_PUBLIC_KEY.
    access_secret: str = Field("change-me", alias="ACCESS_TOKEN_SECRET")
    access_public_key: str | None = Field(None, alias="ACCESS_TOKEN_PUBLIC_KEY")
    access_algorithm: str = Field("HS256", alias="ACCESS_TOKEN_ALGORITHM")
    access_ttl_seconds: int = Field(60 * 60 * 24, ge=1, alias="ACCESS_TOKEN_TTL_SECONDS")

    refresh_secret: str = Field("change-me-too", alias="REFRESH_TOKEN_SECRET")
    refresh_ttl_seconds: int = Field(
        60 * 60 * 24 * 365, ge=1, alias="REFRESH_TOKEN_TTL_SECONDS"
    )

    model_config = _SECTION_CONFIG

    @field_validator("access_algorithm", mode="after")
    @classmethod
    def _check_algorithm(cls, value: str) -> str:
        value = value.upper()
        if value not in ("HS256", "HS384", "HS512", "RS256", "RS384", "RS512"):
            raise ValueError(f"unsupported access token algorithm {value}")
        return value

    @model_validator(mode="after")
    def _distinct_secrets(self) -> "TokenConfig":
        if self.access_secret == self.refresh_secret:
            raise ValueError("access and refresh token secrets must differ")
        if self.access_algorithm.startswith("RS") and not self.access_public_key:
            raise ValueError("ACCESS_TOKEN_PUBLIC_KEY is required for RS* algorithms")
        return self

    @property
    def access_verify_key(self) -> str:
        if self.access_algorithm.startswith("RS"):
            return self.access_public_key or ""
        return self.access_secret


class OtpConfig(BaseSettings):
    hash_secret: str = Field("change-me-otp", alias="OTP_HASH_SECRET")
    ttl_seconds: int = Field(60 * 10, ge=1, alias="OTP_TTL_SECONDS")
    length: int = Field(6, ge=4, le=10, alias="OTP_LENGTH")
    log_codes: bool = Field(False, alias="OTP_LOG_CODES")

    model_config = _SECTION_CONFIG

    @field_validator("log_codes", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)


class MediaConfig(BaseSettings):
    root: Path = Field(Path("instance/media"), alias="MEDIA_ROOT")
    base_url: str = Field("/media", alias="MEDIA_BASE_URL")
    max_bytes: int = Field(5 * 1024 * 1024, ge=1, alias="MEDIA_MAX_BYTES")

    cloudinary_cloud_name: str | None = Field(None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str | None = Field(None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: str | None = Field(None, alias="CLOUDINARY_API_SECRET")
    cloudinary_folder: str = Field("avatars", alias="CLOUDINARY_FOLDER")

    model_config = _SECTION_CONFIG

    def cloudinary_enabled(self) -> bool:
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret
        )


class SecurityConfig(BaseSettings):
    # Cookie security
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Strict", alias="COOKIE_SAMESITE")
    cookie_domain: str | None = Field(None, alias="COOKIE_DOMAIN")

    # CORS
    allowed_origins: Annotated[list[str], NoDecode] = Field(["*"], alias="ALLOWED_ORIGINS")
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")
    trusted_proxy_count: int = Field(0, ge=0, alias="TRUSTED_PROXY_COUNT")

    # Rate limiting
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    rate_limit_requests: int = Field(10, alias="RL_LIMIT")
    rate_limit_window: float = Field(60.0, alias="RL_WINDOW")

    model_config = _SECTION_CONFIG

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("cookie_secure", "enable_rate_limit", "enable_hsts", mode="before")
    @classmethod
    def _parse_bool(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _token_config_factory() -> TokenConfig:
    return TokenConfig()  # type: ignore[call-arg]


def _otp_config_factory() -> OtpConfig:
    return OtpConfig()  # type: ignore[call-arg]


def _media_config_factory() -> MediaConfig:
    return MediaConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")
    admin_email: str | None = Field(None, alias="ADMIN_EMAIL")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    tokens: TokenConfig = Field(default_factory=_token_config_factory)
    otp: OtpConfig = Field(default_factory=_otp_config_factory)
    media: MediaConfig = Field(default_factory=_media_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        arbitrary_types_allowed=True,
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        if isinstance(value, str):
            return value.lower() in ("1", "true", "yes")
        return bool(value)

    @model_validator(mode="after")
    def _distinct_otp_secret(self) -> "AppConfig":
        if self.otp.hash_secret in (self.tokens.access_secret, self.tokens.refresh_secret):
            raise ValueError("OTP_HASH_SECRET must differ from the token signing secrets")
        return self

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        insecure = [
            name
            for name, value in (
                ("ACCESS_TOKEN_SECRET", self.tokens.access_secret),
                ("REFRESH_TOKEN_SECRET", self.tokens.refresh_secret),
                ("OTP_HASH_SECRET", self.otp.hash_secret),
            )
            if value.startswith("change-me") or value in _INSECURE_SECRETS
        ]
        if insecure:
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure secrets detected in production!\n"
                f"   Set strong random values for: {', '.join(insecure)}\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        if self.otp.log_codes:
            print("\n❌ OTP_LOG_CODES must be disabled in production.\n", file=sys.stderr)
            sys.exit(1)

        if not self.security.cookie_secure:
            print(
                "\n⚠️  PRODUCTION SECURITY WARNING: Cookie Secure flag is DISABLED (use HTTPS!)\n",
                file=sys.stderr,
            )

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "MediaConfig",
    "OtpConfig",
    "SecurityConfig",
    "TokenConfig",
    "load_config",
]
