"""solsms SMS channel provider."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

import httpx
import structlog
from pydantic import BaseModel, ValidationError, field_validator

from otpsms.channels.base import CapabilityMetadata, ChannelProvider
from otpsms.config import SolSMSChannelConfig
from otpsms.errors import ConfigError, DispatchError, DispatchErrorKind, InvalidAddressError

logger = structlog.get_logger()

PROVIDER_ID = "solsms"
STATUS_OK = "OK"
MAX_OTP_LEN = 6

_MOBILE_NUMBER_RE = re.compile(r"\+?[0-9]{8,15}")


def mask_address(address: str) -> str:
    """Keep only the last four characters of a destination for log records."""
    if len(address) <= 4:
        return "***"
    return "*" * (len(address) - 4) + address[-4:]


CAPABILITIES = CapabilityMetadata(
    provider_id=PROVIDER_ID,
    channel_name="SMS",
    address_name="Mobile number",
    channel_desc=(
        f"We've sent a {MAX_OTP_LEN} digit code in an SMS to your mobile. "
        "Enter it here to verify your mobile number."
    ),
    address_desc="Please enter your mobile number",
    max_address_len=11,
    max_otp_len=MAX_OTP_LEN,
    max_body_len=140,
)


class GatewayResponse(BaseModel):
    """Reply body returned by the solsms messages API."""

    status: str
    message: str = ""
    data: Any = None

    @field_validator("message", mode="before")
    @classmethod
    def _null_message(cls, value: Any) -> Any:
        return "" if value is None else value


class SolSMSProvider(ChannelProvider):
    """Sends OTP messages through the solsms HTTP gateway.

    One instance owns one ``httpx.AsyncClient``; ``push`` may be awaited
    concurrently since it touches no mutable provider state.
    """

    def __init__(
        self,
        *,
        config: SolSMSChannelConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.limits = httpx.Limits(max_keepalive_connections=config.max_idle_conns)
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout),
            limits=self.limits,
            transport=transport,
        )

    @property
    def capabilities(self) -> CapabilityMetadata:
        return CAPABILITIES

    def validate_address(self, address: str) -> None:
        if not isinstance(address, str) or not _MOBILE_NUMBER_RE.fullmatch(address):
            raise InvalidAddressError(address)

    async def push(self, address: str, body: bytes | str) -> None:
        # urlencode percent-encodes bytes as-is, so the body goes out verbatim.
        payload = urlencode({"sender": self.config.sender, "to": address, "body": body})
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "api-key": self.config.api_key.get_secret_value(),
        }

        try:
            resp = await asyncio.wait_for(
                self._client.post(self.config.endpoint, content=payload, headers=headers),
                timeout=self.config.timeout,
            )
        except TimeoutError as e:
            logger.warning(
                "channels.solsms.push_failed", to=mask_address(address), reason="timeout"
            )
            raise DispatchError(
                DispatchErrorKind.TRANSPORT,
                f"gateway did not respond within {self.config.timeout:g}s",
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(
                "channels.solsms.push_failed", to=mask_address(address), error=str(e)
            )
            raise DispatchError(DispatchErrorKind.TRANSPORT, str(e) or type(e).__name__) from e

        try:
            reply = GatewayResponse.model_validate_json(resp.content)
        except ValidationError as e:
            logger.warning(
                "channels.solsms.push_failed",
                to=mask_address(address),
                status_code=resp.status_code,
                response=resp.text[:300],
            )
            raise DispatchError(
                DispatchErrorKind.PROTOCOL,
                f"unexpected gateway response (HTTP {resp.status_code})",
            ) from e

        if reply.status != STATUS_OK:
            logger.info(
                "channels.solsms.push_rejected",
                to=mask_address(address),
                status=reply.status,
                message=reply.message,
            )
            raise DispatchError(DispatchErrorKind.REJECTED, reply.message)

        logger.info(
            "channels.solsms.push_sent",
            to=mask_address(address),
            status_code=resp.status_code,
        )

    async def aclose(self) -> None:
        await self._client.aclose()


def initialize(
    raw_config: bytes | str | Mapping[str, Any],
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SolSMSProvider:
    """Build a provider from a JSON config blob (or an already-decoded mapping).

    Supported keys::

        {
            "RootURL": "",      # optional root URL of the API
            "APIKey": "",       # API key
            "SID": "",          # account id, used in the endpoint path
            "Sender": "",       # sender name
            "Timeout": 5,       # optional HTTP timeout in seconds
            "MaxIdleConns": 1   # optional idle connections kept per host
        }
    """
    try:
        if isinstance(raw_config, (bytes, bytearray, str)):
            config = SolSMSChannelConfig.model_validate_json(raw_config)
        elif isinstance(raw_config, Mapping):
            config = SolSMSChannelConfig.model_validate(dict(raw_config))
        else:
            raise ConfigError(f"unsupported config type: {type(raw_config).__name__}")
    except ValidationError as e:
        reasons = "; ".join(str(err.get("msg", "")) for err in e.errors())
        raise ConfigError(f"invalid solsms config: {reasons}") from e

    logger.info("channels.solsms.endpoint_resolved", endpoint=config.endpoint)
    return SolSMSProvider(config=config, transport=transport)
