"""Post BTC and BSV fee, ETA and backlog metrics to X.

One invocation runs the whole pipeline once, retrying it once after a fixed
pause on any error. Scheduling is left to the caller (cron, CI schedule).

Processing flow:
1. Check X credentials are configured
2. Identity check against X
3. Fetch BTC and BSV data concurrently
4. Compute metrics and compose the post text
5. Post (skipped in dry run)

Usage:
    python -m feebot.post_metrics [--dry-run] [--tier hourFee]
"""

import argparse
import asyncio
from collections.abc import Callable, Sequence
import sys

from typing import Protocol, TypeAlias

import httpx

from feebot.analysis.metrics import compute_bsv_metrics, compute_btc_metrics
from feebot.data.bsv.fetch import fetch_bsv
from feebot.data.btc.fetch import fetch_btc
from feebot.helpers.config import BotConfig, XCredentials, load_config
from feebot.helpers.constants import BTC_TIER_TO_BLOCKS, MAX_ATTEMPTS, RETRY_DELAY
from feebot.helpers.http import create_http_client, retry_with_fixed_delay
from feebot.helpers.logging import get_logger
from feebot.helpers.models import BsvSnapshot, BtcSnapshot, XUser
from feebot.posting.x_client import XClient, post_url
from feebot.reporting.message import build_message


logger = get_logger(__name__)


class Poster(Protocol):
    """Posting platform operations used by a run."""

    async def get_me(self) -> XUser: ...

    async def create_post(self, text: str) -> str: ...


PosterFactory: TypeAlias = Callable[[XCredentials, httpx.AsyncClient], Poster]


async def fetch_snapshots(client: httpx.AsyncClient) -> tuple[BtcSnapshot, BsvSnapshot]:
    """Fetch both networks concurrently; any failure fails the pair."""
    btc_task = asyncio.create_task(fetch_btc(client))
    bsv_task = asyncio.create_task(fetch_bsv(client))
    try:
        btc, bsv = await asyncio.gather(btc_task, bsv_task)
    except BaseException:
        for task in (btc_task, bsv_task):
            task.cancel()
        raise
    return btc, bsv


async def run_once(
    config: BotConfig,
    client: httpx.AsyncClient,
    *,
    poster_factory: PosterFactory = XClient,
) -> str | None:
    """Run the pipeline once.

    Args:
        config: Run configuration
        client: Shared HTTP client for upstream APIs and X
        poster_factory: Builds the posting client from credentials

    Returns:
        The post id, or None in dry run

    Raises:
        ConfigError: If an X credential is missing
        AuthError: If the identity check fails
        FetchError, ParseError, ValidationError: If upstream data is unusable
        PostError: If the post is rejected or unconfirmed
    """
    logger.info("Checking secrets")
    credentials = config.require_credentials()

    logger.info("Authenticating to X")
    poster = poster_factory(credentials, client)
    me = await poster.get_me()
    logger.info("Auth OK as @%s", me.username)

    btc, bsv = await fetch_snapshots(client)

    btc_metrics = compute_btc_metrics(btc, config.btc_tier)
    bsv_metrics = compute_bsv_metrics(bsv)
    text = build_message(btc_metrics, bsv_metrics, config.explainer_url)
    logger.info("Post text:\n%s", text)

    if config.dry_run:
        logger.info("Dry run, not posting")
        return None

    post_id = await poster.create_post(text)
    logger.info("Posted: %s", post_url(me.username, post_id))
    return post_id


async def run(
    config: BotConfig,
    *,
    poster_factory: PosterFactory = XClient,
    max_attempts: int = MAX_ATTEMPTS,
    delay: float = RETRY_DELAY,
) -> str | None:
    """Run the pipeline, retrying the whole of it after a fixed pause."""

    @retry_with_fixed_delay(max_attempts=max_attempts, delay=delay)
    async def post_metrics() -> str | None:
        async with create_http_client() as client:
            return await run_once(config, client, poster_factory=poster_factory)

    return await post_metrics()


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Post BTC/BSV fee and mempool metrics to X."
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compose and log the post without publishing it (overrides DRY_RUN)",
    )
    parser.add_argument(
        "--tier",
        choices=sorted(BTC_TIER_TO_BLOCKS),
        help="mempool.space fee tier to quote (overrides BTC_TIER)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point. Returns the process exit status."""
    args = parse_args(argv)
    logger.info("Starting post-metrics")

    config = load_config(
        btc_tier=args.tier, dry_run=True if args.dry_run else None
    )

    try:
        asyncio.run(run(config))
    except Exception as e:
        logger.error("Giving up: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
