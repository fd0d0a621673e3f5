"""Fee, ETA and backlog figures derived from one run's snapshots.

All functions are pure. Rounding follows ``round_half_up`` so .5 always
rounds up.
"""

from feebot.helpers.constants import (
    BSV_BACKLOG_THRESHOLDS,
    BSV_SIMPLE_BYTES,
    BTC_BLOCK_VBYTES,
    BTC_DEFAULT_TIER_BLOCKS,
    BTC_SIMPLE_VBYTES,
    BTC_TIER_TO_BLOCKS,
    MINUTES_PER_BLOCK,
    ONE_KB,
)
from feebot.helpers.errors import ValidationError
from feebot.helpers.models import (
    BsvSnapshot,
    BtcSnapshot,
    MiningFee,
    NetworkMetrics,
)
from feebot.helpers.parsers import require_key, require_numeric, round_half_up


def simple_fee_cost(fee_rate: float, size: int, *, floor: int = 0) -> int:
    """Fee for a reference transaction of ``size`` units, never below ``floor``."""
    return max(floor, round_half_up(fee_rate * size))


def one_kilo_unit_cost(fee_rate: float, *, floor: int = 0) -> int:
    """Fee for 1000 units of data, never below ``floor``."""
    return max(floor, round_half_up(fee_rate * ONE_KB))


def btc_eta_minutes(tier: str) -> int:
    """Expected confirmation time for a mempool.space fee tier.

    Unknown tiers count as the hour tier (6 blocks).
    """
    return BTC_TIER_TO_BLOCKS.get(tier, BTC_DEFAULT_TIER_BLOCKS) * MINUTES_PER_BLOCK


def blocks_for_backlog(tx_count: int) -> int:
    """Blocks needed to clear a BSV mempool of ``tx_count`` transactions.

    Example:
        >>> blocks_for_backlog(20_000)
        1
        >>> blocks_for_backlog(20_001)
        2
        >>> blocks_for_backlog(100_001)
        3
    """
    for blocks, threshold in enumerate(BSV_BACKLOG_THRESHOLDS, start=1):
        if tx_count <= threshold:
            return blocks
    return len(BSV_BACKLOG_THRESHOLDS) + 1


def bsv_eta_minutes(tx_count: int) -> int:
    return blocks_for_backlog(tx_count) * MINUTES_PER_BLOCK


def btc_backlog_blocks(total_vsize: float) -> float:
    """Mempool virtual size expressed in 1 MvB blocks, one decimal place."""
    return max(0, round_half_up(total_vsize / BTC_BLOCK_VBYTES * 10) / 10)


def bsv_backlog_blocks(tx_count: int) -> int:
    # Same bucket as the ETA; the mempool info has no size signal to use instead.
    return max(1, bsv_eta_minutes(tx_count) // MINUTES_PER_BLOCK)


def fee_per_unit(mining_fee: MiningFee) -> float:
    """Satoshis per byte of an mAPI fee amount.

    Raises:
        ValidationError: If an operand is not finite or bytes is zero
    """
    satoshis = require_numeric(mining_fee.satoshis, "miningFee.satoshis")
    size = require_numeric(mining_fee.bytes, "miningFee.bytes")
    if size == 0:
        msg = "miningFee.bytes is zero"
        raise ValidationError(msg)
    return satoshis / size


def btc_fee_rate(fees: dict, tier: str) -> float:
    """Fee rate of the selected tier in sat/vB.

    Raises:
        ValidationError: If the tier is absent or not a finite number
    """
    return require_numeric(require_key(fees, tier, "BTC fee tier"), f"BTC {tier}")


def compute_btc_metrics(snapshot: BtcSnapshot, tier: str) -> NetworkMetrics:
    fee_rate = btc_fee_rate(snapshot.fees, tier)
    return NetworkMetrics(
        simple_fee=simple_fee_cost(fee_rate, BTC_SIMPLE_VBYTES),
        eta_minutes=btc_eta_minutes(tier),
        one_kb_fee=one_kilo_unit_cost(fee_rate),
        backlog_count=snapshot.mempool.count,
        backlog_blocks=btc_backlog_blocks(snapshot.mempool.vsize),
    )


def compute_bsv_metrics(snapshot: BsvSnapshot) -> NetworkMetrics:
    """BSV figures; fees are floored at 1 sat so a quote never shows as free."""
    standard_rate = fee_per_unit(snapshot.standard_fee.mining_fee)
    data_rate = fee_per_unit(snapshot.data_fee.mining_fee)
    count = snapshot.mempool.count
    return NetworkMetrics(
        simple_fee=simple_fee_cost(standard_rate, BSV_SIMPLE_BYTES, floor=1),
        eta_minutes=bsv_eta_minutes(count),
        one_kb_fee=one_kilo_unit_cost(data_rate, floor=1),
        backlog_count=count,
        backlog_blocks=bsv_backlog_blocks(count),
    )


__all__ = [
    "blocks_for_backlog",
    "bsv_backlog_blocks",
    "bsv_eta_minutes",
    "btc_backlog_blocks",
    "btc_eta_minutes",
    "btc_fee_rate",
    "compute_bsv_metrics",
    "compute_btc_metrics",
    "fee_per_unit",
    "one_kilo_unit_cost",
    "simple_fee_cost",
]
