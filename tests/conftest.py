"""Shared fixtures: upstream API bodies and run configuration."""

import base64
import json

import pytest

from typing import Any

from feebot.helpers.config import BotConfig, XCredentials


@pytest.fixture
def btc_fees() -> dict[str, Any]:
    """mempool.space /v1/fees/recommended body."""
    return {
        "fastestFee": 25,
        "halfHourFee": 18,
        "hourFee": 10,
        "economyFee": 5,
        "minimumFee": 2,
    }


@pytest.fixture
def btc_mempool() -> dict[str, Any]:
    """mempool.space /mempool body."""
    return {
        "count": 12_345,
        "vsize": 2_500_000,
        "total_fee": 5_081_263,
        "fee_histogram": [[53.1, 102_131]],
    }


@pytest.fixture
def fee_quote() -> dict[str, Any]:
    """Decoded mAPI fee quote payload with standard and data fees."""
    return {
        "apiVersion": "1.5.0",
        "expiryTime": "2026-10-19T12:10:00.000Z",
        "fees": [
            {
                "feeType": "Standard",
                "miningFee": {"satoshis": 1, "bytes": 1},
                "relayFee": {"satoshis": 1, "bytes": 4},
            },
            {
                "feeType": "Data",
                "miningFee": {"satoshis": 1, "bytes": 2},
                "relayFee": {"satoshis": 1, "bytes": 4},
            },
        ],
    }


@pytest.fixture
def standard_only_quote() -> dict[str, Any]:
    return {"fees": [{"feeType": "standard", "miningFee": {"satoshis": 1, "bytes": 1}}]}


@pytest.fixture
def raw_envelope(fee_quote: dict[str, Any]) -> dict[str, Any]:
    """mAPI envelope whose payload is raw JSON text."""
    return {
        "payload": json.dumps(fee_quote),
        "signature": "3045022100ab",
        "publicKey": "03e92d3e5c3f7bd945dfbf48e7a99393b1bfb3f11f380ae30d286e7ff2aec5a270",
        "encoding": "UTF-8",
        "mimetype": "application/json",
    }


@pytest.fixture
def base64_envelope(fee_quote: dict[str, Any]) -> dict[str, Any]:
    """mAPI envelope whose payload is base64-encoded JSON text."""
    encoded = base64.b64encode(json.dumps(fee_quote).encode("utf-8")).decode("ascii")
    return {"payload": encoded, "signature": None, "publicKey": None}


@pytest.fixture
def bsv_mempool() -> dict[str, Any]:
    """WhatsOnChain /mempool/info body."""
    return {"count": 50_000, "size": 50_000, "bytes": 21_436_712, "usage": 80_612_416}


@pytest.fixture
def credentials() -> XCredentials:
    return XCredentials(
        app_key="app-key",
        app_secret="app-secret",
        access_token="access-token",
        access_secret="access-secret",
    )


@pytest.fixture
def config(credentials: XCredentials) -> BotConfig:
    """Configuration with credentials, default tier, posting enabled."""
    return BotConfig(**credentials.model_dump())
