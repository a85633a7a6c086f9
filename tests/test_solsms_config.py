from __future__ import annotations

import json

import pytest

from otpsms.channels.solsms.provider import SolSMSProvider, initialize
from otpsms.config import SOLSMS_API_URL, SolSMSChannelConfig
from otpsms.errors import ConfigError


def _blob(**overrides) -> bytes:
    cfg = {"APIKey": "key-123", "SID": "acct", "Sender": "OTPSMS", **overrides}
    return json.dumps(cfg).encode()


def test_initialize_defaults_root_url() -> None:
    provider = initialize(_blob())

    assert isinstance(provider, SolSMSProvider)
    assert provider.config.root_url == SOLSMS_API_URL
    assert provider.config.endpoint == "https://api.kaleyra.io/v1/acct/messages"


def test_empty_root_url_uses_default() -> None:
    provider = initialize(_blob(RootURL=""))

    assert provider.config.endpoint == "https://api.kaleyra.io/v1/acct/messages"


@pytest.mark.parametrize("root", ["https://x/", "https://x", "https://x///"])
def test_endpoint_has_no_double_slash(root: str) -> None:
    provider = initialize(_blob(RootURL=root))

    assert provider.config.endpoint == "https://x/acct/messages"


@pytest.mark.parametrize("missing", ["APIKey", "Sender", "SID"])
def test_empty_required_field_is_config_error(missing: str) -> None:
    with pytest.raises(ConfigError, match="invalid APIKey or Sender or SID"):
        initialize(_blob(**{missing: ""}, RootURL="https://x/", Timeout=9, MaxIdleConns=4))


def test_absent_required_field_is_config_error() -> None:
    with pytest.raises(ConfigError):
        initialize(json.dumps({"APIKey": "k", "Sender": "s"}))


@pytest.mark.parametrize(
    "raw",
    [b"not json", b"[1, 2]", b"null", b'{"APIKey": 5, "SID": "a", "Sender": "s"}'],
)
def test_undecodable_blob_is_config_error(raw: bytes) -> None:
    with pytest.raises(ConfigError):
        initialize(raw)


def test_unsupported_config_type_is_config_error() -> None:
    with pytest.raises(ConfigError, match="unsupported config type"):
        initialize(42)  # type: ignore[arg-type]


def test_timeout_and_idle_conns_default_when_unset_or_zero() -> None:
    unset = initialize(_blob()).config
    zero = initialize(_blob(Timeout=0, MaxIdleConns=0)).config

    for cfg in (unset, zero):
        assert cfg.timeout == 5.0
        assert cfg.max_idle_conns == 1


def test_timeout_and_idle_conns_from_blob() -> None:
    cfg = initialize(_blob(Timeout=12, MaxIdleConns=3)).config

    assert cfg.timeout == 12.0
    assert cfg.max_idle_conns == 3


def test_snake_case_mapping_is_accepted() -> None:
    provider = initialize(
        {"api_key": "k", "sid": "acct", "sender": "S", "root_url": "https://gw.example/v2"}
    )

    assert provider.config.endpoint == "https://gw.example/v2/acct/messages"


def test_config_is_immutable() -> None:
    cfg = SolSMSChannelConfig(api_key="k", sid="acct", sender="S")

    with pytest.raises(Exception):
        cfg.sid = "other"  # type: ignore[misc]


def test_api_key_is_not_exposed_in_repr() -> None:
    cfg = SolSMSChannelConfig(api_key="super-secret", sid="acct", sender="S")

    assert "super-secret" not in repr(cfg)
    assert cfg.api_key.get_secret_value() == "super-secret"


def test_idle_connection_cap_reaches_client_pool() -> None:
    provider = initialize(_blob(MaxIdleConns=3))

    assert provider.limits.max_keepalive_connections == 3
    pool = provider._client._transport._pool
    assert pool._max_keepalive_connections == 3


def test_idle_connection_cap_defaults_to_one_in_pool() -> None:
    provider = initialize(_blob())

    assert provider._client._transport._pool._max_keepalive_connections == 1
