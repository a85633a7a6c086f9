"""Provider registry — maps provider ids to factories that build them from raw config."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from otpsms.channels.base import CapabilityMetadata, ChannelProvider
from otpsms.channels.solsms.provider import CAPABILITIES as SOLSMS_CAPABILITIES
from otpsms.channels.solsms.provider import initialize as initialize_solsms
from otpsms.errors import ConfigError

logger = structlog.get_logger()

ProviderFactory = Callable[..., ChannelProvider]


@dataclass(frozen=True)
class _Registration:
    factory: ProviderFactory
    capabilities: CapabilityMetadata


_registry: dict[str, _Registration] = {
    SOLSMS_CAPABILITIES.provider_id: _Registration(initialize_solsms, SOLSMS_CAPABILITIES),
}


def _key(provider_id: str) -> str:
    return (provider_id or "").strip().lower()


def register_provider(factory: ProviderFactory, capabilities: CapabilityMetadata) -> None:
    """Register a factory taking ``(raw_config, **kwargs)`` under ``capabilities.provider_id``."""
    key = _key(capabilities.provider_id)
    if not key:
        raise ValueError("provider id must not be empty")
    if key in _registry:
        logger.info("channels.registry.provider_replaced", provider=key)
    _registry[key] = _Registration(factory, capabilities)


def unregister_provider(provider_id: str) -> None:
    _registry.pop(_key(provider_id), None)


def available_providers() -> list[CapabilityMetadata]:
    return [_registry[key].capabilities for key in sorted(_registry)]


def provider_capabilities(provider_id: str) -> CapabilityMetadata:
    registration = _registry.get(_key(provider_id))
    if registration is None:
        raise ConfigError(f"unknown provider: {provider_id!r}")
    return registration.capabilities


def load_provider(
    provider_id: str,
    raw_config: bytes | str | Mapping[str, Any],
    **kwargs: Any,
) -> ChannelProvider:
    """Construct the provider registered as ``provider_id``.

    Raises ConfigError for unknown ids or when the factory rejects the config.
    """
    registration = _registry.get(_key(provider_id))
    if registration is None:
        raise ConfigError(f"unknown provider: {provider_id!r}")

    provider = registration.factory(raw_config, **kwargs)
    logger.info("channels.registry.provider_loaded", provider=provider.id)
    return provider
