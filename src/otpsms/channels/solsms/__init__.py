"""solsms SMS gateway channel."""

from otpsms.channels.solsms.provider import CAPABILITIES, GatewayResponse, SolSMSProvider, initialize

__all__ = ["CAPABILITIES", "GatewayResponse", "SolSMSProvider", "initialize"]
