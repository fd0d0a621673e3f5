"""Fixed values shared across the metrics bot."""

# Upstream endpoints
BTC_FEES_URL = "https://mempool.space/api/v1/fees/recommended"
"""mempool.space recommended fee table (sat/vB per tier)"""

BTC_MEMPOOL_URL = "https://mempool.space/api/mempool"
"""mempool.space mempool summary (count, vsize)"""

BSV_FEE_QUOTE_URL = "https://mapi.gorillapool.io/mapi/feeQuote"
"""GorillaPool mAPI fee quote envelope"""

BSV_MEMPOOL_URL = "https://api.whatsonchain.com/v1/bsv/main/mempool/info"
"""WhatsOnChain mempool info (count)"""

# Posting platform
X_ME_URL = "https://api.twitter.com/2/users/me"
X_POSTS_URL = "https://api.twitter.com/2/tweets"
X_STATUS_URL = "https://x.com/{handle}/status/{post_id}"

# Reference transaction sizes
BTC_SIMPLE_VBYTES = 140
"""1-input/2-output segwit transfer"""

BSV_SIMPLE_BYTES = 226
"""1-input/2-output legacy transfer"""

ONE_KB = 1000

# Block heuristics
MINUTES_PER_BLOCK = 10

BTC_BLOCK_VBYTES = 1_000_000
"""Assumed block capacity used to express the backlog in blocks"""

BTC_DEFAULT_TIER = "hourFee"

BTC_TIER_TO_BLOCKS = {
    "fastestFee": 1,
    "halfHourFee": 3,
    "hourFee": 6,
    "economyFee": 12,
    "minimumFee": 18,
}
"""Expected confirmation blocks per mempool.space fee tier"""

BTC_DEFAULT_TIER_BLOCKS = 6

BSV_BACKLOG_THRESHOLDS = (20_000, 100_000)
"""Pending-tx counts that still clear in one and two blocks"""

# Message limits
MESSAGE_LIMIT = 280
ELLIPSIS = "..."

# HTTP and retry
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

MAX_ATTEMPTS = 2
"""First run plus one retry"""

RETRY_DELAY = 2.0
"""Fixed pause before the retry in seconds"""


__all__ = [
    "BSV_BACKLOG_THRESHOLDS",
    "BSV_FEE_QUOTE_URL",
    "BSV_MEMPOOL_URL",
    "BSV_SIMPLE_BYTES",
    "BTC_BLOCK_VBYTES",
    "BTC_DEFAULT_TIER",
    "BTC_DEFAULT_TIER_BLOCKS",
    "BTC_FEES_URL",
    "BTC_MEMPOOL_URL",
    "BTC_SIMPLE_VBYTES",
    "BTC_TIER_TO_BLOCKS",
    "DEFAULT_TIMEOUT",
    "ELLIPSIS",
    "MAX_ATTEMPTS",
    "MESSAGE_LIMIT",
    "MINUTES_PER_BLOCK",
    "ONE_KB",
    "RETRY_DELAY",
    "X_ME_URL",
    "X_POSTS_URL",
    "X_STATUS_URL",
]
