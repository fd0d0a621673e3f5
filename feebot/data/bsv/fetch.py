"""Bitcoin SV fee quote (GorillaPool mAPI) and mempool (WhatsOnChain) reader.

The mAPI envelope carries its fee quote in a ``payload`` string that is either
raw JSON or base64-encoded JSON, depending on the miner. Both are tried in
order through ``decode_payload``.
"""

from typing import Any

import httpx

from feebot.helpers.constants import BSV_FEE_QUOTE_URL, BSV_MEMPOOL_URL
from feebot.helpers.errors import ValidationError
from feebot.helpers.http import fetch_json
from feebot.helpers.logging import get_logger
from feebot.helpers.models import (
    BsvMempool,
    BsvSnapshot,
    FeeRecord,
    validate_model,
)
from feebot.helpers.parsers import decode_payload, require_key


logger = get_logger(__name__)

STANDARD_FEE_TYPE = "standard"
DATA_FEE_TYPE = "data"


def find_fee_record(fees: list[Any], fee_type: str) -> dict[str, Any] | None:
    """Return the first record whose feeType matches case-insensitively."""
    for record in fees:
        if isinstance(record, dict) and str(record.get("feeType")).lower() == fee_type:
            return record
    return None


def select_fee_records(fees: Any) -> tuple[FeeRecord, FeeRecord]:
    """Pick the standard fee and the data fee from an mAPI fee list.

    The data fee falls back to the standard fee when the quote has none.

    Args:
        fees: The ``fees`` list of a decoded fee quote

    Returns:
        tuple[FeeRecord, FeeRecord]: (standard, data)

    Raises:
        ValidationError: If the list is not a list or has no standard entry
    """
    if not isinstance(fees, list):
        msg = f"BSV fee list is not a list: {type(fees).__name__}"
        raise ValidationError(msg)

    standard = find_fee_record(fees, STANDARD_FEE_TYPE)
    if standard is None:
        msg = "BSV: no standard fee"
        raise ValidationError(msg)
    standard_fee = validate_model(FeeRecord, standard, "BSV standard fee")

    data = find_fee_record(fees, DATA_FEE_TYPE)
    if data is None:
        return standard_fee, standard_fee
    return standard_fee, validate_model(FeeRecord, data, "BSV data fee")


async def fetch_bsv(
    client: httpx.AsyncClient,
    *,
    fee_quote_url: str = BSV_FEE_QUOTE_URL,
    mempool_url: str = BSV_MEMPOOL_URL,
) -> BsvSnapshot:
    """Read the mAPI fee quote and the mempool info.

    Raises:
        FetchError: If either endpoint answers with a non-success status
        ParseError: If a body is not JSON or the payload decodes by no strategy
        ValidationError: If payload, fee list or standard fee is missing
    """
    logger.info("Fetching BSV feeQuote & mempool")

    envelope = await fetch_json(client, fee_quote_url, endpoint="BSV mAPI")
    payload = require_key(envelope, "payload", "mAPI envelope")
    quote = decode_payload(payload, label="BSV mAPI payload")
    fees = require_key(quote, "fees", "fee list")
    standard_fee, data_fee = select_fee_records(fees)

    mempool_data = await fetch_json(client, mempool_url, endpoint="BSV WOC mempool")
    mempool = validate_model(BsvMempool, mempool_data, "BSV mempool")

    logger.debug(
        "BSV standard=%s data=%s mempool count=%s",
        standard_fee.mining_fee,
        data_fee.mining_fee,
        mempool.count,
    )
    return BsvSnapshot(standard_fee=standard_fee, data_fee=data_fee, mempool=mempool)


__all__ = ["fetch_bsv", "find_fee_record", "select_fee_records"]
