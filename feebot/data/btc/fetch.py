"""Bitcoin fee table and mempool reader (mempool.space)."""

import httpx

from feebot.helpers.constants import BTC_FEES_URL, BTC_MEMPOOL_URL
from feebot.helpers.errors import ValidationError
from feebot.helpers.http import fetch_json
from feebot.helpers.logging import get_logger
from feebot.helpers.models import BtcMempool, BtcSnapshot, validate_model


logger = get_logger(__name__)


async def fetch_btc(
    client: httpx.AsyncClient,
    *,
    fees_url: str = BTC_FEES_URL,
    mempool_url: str = BTC_MEMPOOL_URL,
) -> BtcSnapshot:
    """Read the recommended fee table and the mempool summary.

    Args:
        client: Shared HTTP client
        fees_url: Recommended-fees endpoint
        mempool_url: Mempool-summary endpoint

    Returns:
        BtcSnapshot: Raw fee table plus validated mempool summary

    Raises:
        FetchError: If either endpoint answers with a non-success status
        ParseError: If either body is not JSON
        ValidationError: If the fee table is not an object or the mempool is malformed
    """
    logger.info("Fetching BTC fees & mempool")

    fees = await fetch_json(client, fees_url, endpoint="BTC fees")
    if not isinstance(fees, dict):
        msg = f"BTC fees response is not an object: {type(fees).__name__}"
        raise ValidationError(msg)

    mempool_data = await fetch_json(client, mempool_url, endpoint="BTC mempool")
    mempool = validate_model(BtcMempool, mempool_data, "BTC mempool")

    logger.debug("BTC fees=%s mempool count=%s vsize=%s", fees, mempool.count, mempool.vsize)
    return BtcSnapshot(fees=fees, mempool=mempool)


__all__ = ["fetch_btc"]
