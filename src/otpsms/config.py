"""otpsms configuration — provider configs plus host settings from otpsms.yaml + env."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

SOLSMS_API_URL = "https://api.kaleyra.io/v1/"
DEFAULT_TIMEOUT_S = 5.0
DEFAULT_MAX_IDLE_CONNS = 1


def _yaml_config_path() -> Path:
    """otpsms.yaml from OTPSMS_CONFIG_PATH or the working directory."""
    config_path = os.getenv("OTPSMS_CONFIG_PATH")
    return Path(config_path) if config_path else Path("otpsms.yaml")


def _normalize_key(key: Any) -> str:
    return str(key).replace("_", "").replace("-", "").lower()


class SolSMSChannelConfig(BaseModel):
    """Configuration blob for the solsms gateway.

    Keys may be given in the gateway's own spelling (``RootURL``, ``APIKey``,
    ``SID``, ``Sender``, ``Timeout``, ``MaxIdleConns``) or in snake case.
    """

    root_url: str = Field(default=SOLSMS_API_URL, description="Root URL of the gateway API")
    api_key: SecretStr = Field(default=SecretStr(""), description="Gateway API key")
    sid: str = Field(default="", description="Gateway account identifier")
    sender: str = Field(default="", description="Sender name shown to recipients")
    timeout: float = Field(default=DEFAULT_TIMEOUT_S, ge=0, description="HTTP timeout in seconds")
    max_idle_conns: int = Field(
        default=DEFAULT_MAX_IDLE_CONNS,
        ge=0,
        description="Idle keep-alive connections kept per host",
    )

    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        by_key = {_normalize_key(name): name for name in cls.model_fields}
        normalized: dict[str, Any] = {}
        for key, item in value.items():
            field_name = by_key.get(_normalize_key(key))
            if field_name is not None:
                normalized[field_name] = item
        return normalized

    @field_validator("root_url", mode="before")
    @classmethod
    def _default_root_url(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return SOLSMS_API_URL
        return value.strip() if isinstance(value, str) else value

    @field_validator("timeout", mode="before")
    @classmethod
    def _default_timeout(cls, value: Any) -> Any:
        if value is None or value == 0:
            return DEFAULT_TIMEOUT_S
        return value

    @field_validator("max_idle_conns", mode="before")
    @classmethod
    def _default_max_idle_conns(cls, value: Any) -> Any:
        if value is None or value == 0:
            return DEFAULT_MAX_IDLE_CONNS
        return value

    @model_validator(mode="after")
    def _check_required(self) -> SolSMSChannelConfig:
        if not self.api_key.get_secret_value() or not self.sender or not self.sid:
            raise ValueError("invalid APIKey or Sender or SID")
        return self

    @property
    def endpoint(self) -> str:
        """Fully-qualified messages endpoint for the configured account."""
        return f"{self.root_url.rstrip('/')}/{self.sid}/messages"


class OTPSMSConfig(BaseSettings):
    """Host-side settings used by the CLI and by applications embedding otpsms."""

    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="'json' or 'console'")
    default_provider: str = Field(default="solsms")
    providers: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Raw per-provider config blobs keyed by provider id",
    )

    model_config = SettingsConfigDict(
        env_prefix="OTPSMS_",
        env_nested_delimiter="__",
    )

    @field_validator("providers", mode="before")
    @classmethod
    def _parse_providers(cls, value: Any) -> dict[str, dict[str, Any]]:
        if value is None:
            return {}
        if isinstance(value, dict):
            merged: dict[str, dict[str, Any]] = {}
            for key, blob in value.items():
                merged.setdefault(str(key).strip().lower(), {}).update(blob or {})
            return merged
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Earlier sources win: explicit kwargs, then env, then otpsms.yaml.
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=_yaml_config_path()),
            dotenv_settings,
            file_secret_settings,
        )

    @classmethod
    def load(cls) -> OTPSMSConfig:
        """Load settings from env vars, falling back to otpsms.yaml."""
        return cls()

    def provider_config(self, provider_id: str) -> dict[str, Any]:
        return self.providers.get(provider_id.strip().lower(), {})


# Singleton
_config: OTPSMSConfig | None = None


def get_config() -> OTPSMSConfig:
    """Get or create the global config."""
    global _config
    if _config is None:
        _config = OTPSMSConfig.load()
    return _config


def reset_config() -> None:
    global _config
    _config = None
