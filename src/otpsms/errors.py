"""Exceptions raised by OTP channel providers."""

from __future__ import annotations

from enum import Enum


class OTPSMSError(Exception):
    """Base class for all otpsms errors."""


class ConfigError(OTPSMSError):
    """Raised when a provider config is invalid or missing."""


class InvalidAddressError(OTPSMSError):
    """Raised when a destination address fails syntactic validation."""

    def __init__(self, address: str, message: str = "invalid mobile number") -> None:
        super().__init__(message)
        self.address = address


class DispatchErrorKind(str, Enum):
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    REJECTED = "rejected"


class DispatchError(OTPSMSError):
    """Raised when a message could not be handed to the gateway.

    ``TRANSPORT`` covers timeouts and connection failures, ``PROTOCOL`` a
    malformed gateway reply, and ``REJECTED`` an explicit refusal whose
    ``detail`` is the gateway's own message.
    """

    def __init__(self, kind: DispatchErrorKind, detail: str = "") -> None:
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail

    @property
    def retryable(self) -> bool:
        return self.kind is not DispatchErrorKind.REJECTED

    def __repr__(self) -> str:
        return f"DispatchError(kind={self.kind.value!r}, detail={self.detail!r})"
