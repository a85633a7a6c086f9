"""otpsms — pluggable OTP delivery channels over third-party SMS gateways."""

from otpsms.channels.base import CapabilityMetadata, ChannelProvider, OTPRequest
from otpsms.channels.registry import available_providers, load_provider, register_provider
from otpsms.channels.solsms.provider import SolSMSProvider, initialize
from otpsms.errors import (
    ConfigError,
    DispatchError,
    DispatchErrorKind,
    InvalidAddressError,
    OTPSMSError,
)

__version__ = "0.1.0"

__all__ = [
    "CapabilityMetadata",
    "ChannelProvider",
    "ConfigError",
    "DispatchError",
    "DispatchErrorKind",
    "InvalidAddressError",
    "OTPRequest",
    "OTPSMSError",
    "SolSMSProvider",
    "available_providers",
    "initialize",
    "load_provider",
    "register_provider",
]
