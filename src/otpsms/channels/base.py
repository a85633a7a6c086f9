"""Core channel abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CapabilityMetadata:
    """Static description of a delivery channel, used by hosts to render UI and enforce limits."""

    provider_id: str
    channel_name: str
    address_name: str
    channel_desc: str
    address_desc: str
    max_address_len: int
    max_otp_len: int
    max_body_len: int


@dataclass(frozen=True)
class OTPRequest:
    """A single OTP delivery handed over by the host."""

    to: str
    body: bytes


class ChannelProvider(ABC):
    """Interface implemented by all OTP delivery channels."""

    @property
    @abstractmethod
    def capabilities(self) -> CapabilityMetadata:
        ...

    @property
    def id(self) -> str:
        return self.capabilities.provider_id

    @property
    def channel_name(self) -> str:
        return self.capabilities.channel_name

    @property
    def address_name(self) -> str:
        return self.capabilities.address_name

    @property
    def channel_desc(self) -> str:
        return self.capabilities.channel_desc

    @property
    def address_desc(self) -> str:
        return self.capabilities.address_desc

    @property
    def max_address_len(self) -> int:
        return self.capabilities.max_address_len

    @property
    def max_otp_len(self) -> int:
        return self.capabilities.max_otp_len

    @property
    def max_body_len(self) -> int:
        return self.capabilities.max_body_len

    @abstractmethod
    def validate_address(self, address: str) -> None:
        """Raise InvalidAddressError if the address is not acceptable for this channel."""
        ...

    @abstractmethod
    async def push(self, address: str, body: bytes | str) -> None:
        """Deliver one message. Raises DispatchError on failure."""
        ...

    async def push_request(self, request: OTPRequest) -> None:
        await self.push(request.to, request.body)

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
        pass

    async def __aenter__(self) -> ChannelProvider:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"<ChannelProvider: {self.id} ({self.channel_name})>"
