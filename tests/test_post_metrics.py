"""Tests for the post-metrics orchestrator and CLI."""

import httpx
import pytest

from typing import TYPE_CHECKING, Any

from feebot import post_metrics
from feebot.helpers.config import BotConfig, XCredentials
from feebot.helpers.constants import (
    BSV_FEE_QUOTE_URL,
    BSV_MEMPOOL_URL,
    BTC_FEES_URL,
    BTC_MEMPOOL_URL,
    X_ME_URL,
    X_POSTS_URL,
)
from feebot.helpers.errors import AuthError, ConfigError, FetchError, PostError
from feebot.helpers.models import (
    BsvMempool,
    BsvSnapshot,
    BtcMempool,
    BtcSnapshot,
    FeeRecord,
    XUser,
)
from feebot.post_metrics import main, run, run_once


if TYPE_CHECKING:
    from pytest_httpx import HTTPXMock


EXPECTED_TEXT = (
    "BTC fee:1400s ~60m | BSV fee:226s ~20m\n"
    "1KB data — BTC:10000s | BSV:500s\n"
    "Backlog — BTC:12.3ktx(~2.5b) | BSV:50ktx(~2b)"
)


class FakePoster:
    """In-memory stand-in for the X client."""

    def __init__(
        self,
        *,
        me_error: Exception | None = None,
        me_failures: int | None = None,
        post_error: Exception | None = None,
    ) -> None:
        self.me_error = me_error
        self.me_failures = me_failures
        self.post_error = post_error
        self.me_calls = 0
        self.posts: list[str] = []

    async def get_me(self) -> XUser:
        self.me_calls += 1
        if self.me_error and (self.me_failures is None or self.me_calls <= self.me_failures):
            raise self.me_error
        return XUser(id="1", username="feebot")

    async def create_post(self, text: str) -> str:
        if self.post_error:
            raise self.post_error
        self.posts.append(text)
        return "99"


def factory_for(poster: FakePoster) -> Any:
    def factory(credentials: XCredentials, client: httpx.AsyncClient) -> FakePoster:
        return poster

    return factory


@pytest.fixture
def btc_snapshot() -> BtcSnapshot:
    return BtcSnapshot(
        fees={"hourFee": 10, "fastestFee": 30},
        mempool=BtcMempool(count=12_345, vsize=2_500_000),
    )


@pytest.fixture
def bsv_snapshot() -> BsvSnapshot:
    standard = FeeRecord(feeType="standard", miningFee={"satoshis": 1, "bytes": 1})
    data = FeeRecord(feeType="data", miningFee={"satoshis": 1, "bytes": 2})
    return BsvSnapshot(
        standard_fee=standard, data_fee=data, mempool=BsvMempool(count=50_000)
    )


@pytest.fixture
def stub_fetchers(
    monkeypatch: pytest.MonkeyPatch,
    btc_snapshot: BtcSnapshot,
    bsv_snapshot: BsvSnapshot,
) -> dict[str, int]:
    """Replace both fetchers with canned snapshots and count calls."""
    calls = {"btc": 0, "bsv": 0}

    async def fake_fetch_btc(client: httpx.AsyncClient) -> BtcSnapshot:
        calls["btc"] += 1
        return btc_snapshot

    async def fake_fetch_bsv(client: httpx.AsyncClient) -> BsvSnapshot:
        calls["bsv"] += 1
        return bsv_snapshot

    monkeypatch.setattr(post_metrics, "fetch_btc", fake_fetch_btc)
    monkeypatch.setattr(post_metrics, "fetch_bsv", fake_fetch_bsv)
    return calls


@pytest.mark.usefixtures("stub_fetchers")
class TestRunOnce:
    """Tests for a single pipeline run."""

    @pytest.mark.asyncio
    async def test_posts_composed_text(self, config: BotConfig) -> None:
        """Test the composed message is posted and the id returned."""
        poster = FakePoster()

        async with httpx.AsyncClient() as client:
            post_id = await run_once(config, client, poster_factory=factory_for(poster))

        assert post_id == "99"
        assert poster.posts == [EXPECTED_TEXT]

    @pytest.mark.asyncio
    async def test_dry_run_does_not_post(self, config: BotConfig) -> None:
        """Test dry run composes but skips the post."""
        poster = FakePoster()
        dry_config = config.model_copy(update={"dry_run": True})

        async with httpx.AsyncClient() as client:
            post_id = await run_once(
                dry_config, client, poster_factory=factory_for(poster)
            )

        assert post_id is None
        assert poster.posts == []
        assert poster.me_calls == 1

    @pytest.mark.asyncio
    async def test_explainer_url_appended(self, config: BotConfig) -> None:
        """Test the explainer URL becomes the last line."""
        poster = FakePoster()
        url_config = config.model_copy(
            update={"explainer_url": "https://example.com/fees"}
        )

        async with httpx.AsyncClient() as client:
            await run_once(url_config, client, poster_factory=factory_for(poster))

        assert poster.posts[0].endswith("\nMore: https://example.com/fees")

    @pytest.mark.asyncio
    async def test_missing_credentials_fail_before_auth(
        self, stub_fetchers: dict[str, int]
    ) -> None:
        """Test a missing credential raises ConfigError before any call."""
        poster = FakePoster()

        async with httpx.AsyncClient() as client:
            with pytest.raises(ConfigError, match="X_APP_KEY"):
                await run_once(BotConfig(), client, poster_factory=factory_for(poster))

        assert poster.me_calls == 0
        assert stub_fetchers == {"btc": 0, "bsv": 0}

    @pytest.mark.asyncio
    async def test_auth_failure_stops_before_fetch(
        self, config: BotConfig, stub_fetchers: dict[str, int]
    ) -> None:
        """Test an identity check failure raises AuthError before fetching."""
        poster = FakePoster(me_error=AuthError("X identity check HTTP 401", "Unauthorized"))

        async with httpx.AsyncClient() as client:
            with pytest.raises(AuthError, match="Unauthorized"):
                await run_once(config, client, poster_factory=factory_for(poster))

        assert stub_fetchers == {"btc": 0, "bsv": 0}

    @pytest.mark.asyncio
    async def test_post_failure_propagates(self, config: BotConfig) -> None:
        """Test a rejected post raises PostError."""
        poster = FakePoster(post_error=PostError("X post HTTP 403", "duplicate"))

        async with httpx.AsyncClient() as client:
            with pytest.raises(PostError, match="duplicate"):
                await run_once(config, client, poster_factory=factory_for(poster))


class TestRunWithRetry:
    """Tests for the whole-pipeline retry."""

    @pytest.mark.asyncio
    async def test_fetch_failure_retried_once(
        self,
        monkeypatch: pytest.MonkeyPatch,
        config: BotConfig,
        bsv_snapshot: BsvSnapshot,
    ) -> None:
        """Test a failing BTC mempool read fails the run after exactly one retry."""
        btc_calls = 0

        async def failing_fetch_btc(client: httpx.AsyncClient) -> BtcSnapshot:
            nonlocal btc_calls
            btc_calls += 1
            raise FetchError("BTC mempool", 503)

        async def fake_fetch_bsv(client: httpx.AsyncClient) -> BsvSnapshot:
            return bsv_snapshot

        monkeypatch.setattr(post_metrics, "fetch_btc", failing_fetch_btc)
        monkeypatch.setattr(post_metrics, "fetch_bsv", fake_fetch_bsv)
        poster = FakePoster()

        with pytest.raises(FetchError, match="BTC mempool HTTP 503"):
            await run(config, poster_factory=factory_for(poster), delay=0)

        assert btc_calls == 2
        assert poster.me_calls == 2
        assert poster.posts == []

    @pytest.mark.asyncio
    async def test_second_attempt_can_succeed(
        self, config: BotConfig, stub_fetchers: dict[str, int]
    ) -> None:
        """Test a transient auth failure is recovered by the retry."""
        poster = FakePoster(
            me_error=AuthError("X identity check failed", "reset"), me_failures=1
        )

        post_id = await run(config, poster_factory=factory_for(poster), delay=0)

        assert post_id == "99"
        assert poster.me_calls == 2
        assert stub_fetchers == {"btc": 1, "bsv": 1}

    @pytest.mark.asyncio
    async def test_end_to_end_over_http(
        self,
        httpx_mock: "HTTPXMock",
        config: BotConfig,
        btc_fees: dict[str, Any],
        btc_mempool: dict[str, Any],
        raw_envelope: dict[str, Any],
        bsv_mempool: dict[str, Any],
    ) -> None:
        """Test the real fetchers and X client against mocked endpoints."""
        httpx_mock.add_response(
            url=X_ME_URL, json={"data": {"id": "1", "username": "feebot"}}
        )
        httpx_mock.add_response(url=BTC_FEES_URL, json=btc_fees)
        httpx_mock.add_response(url=BTC_MEMPOOL_URL, json=btc_mempool)
        httpx_mock.add_response(url=BSV_FEE_QUOTE_URL, json=raw_envelope)
        httpx_mock.add_response(url=BSV_MEMPOOL_URL, json=bsv_mempool)
        httpx_mock.add_response(
            url=X_POSTS_URL, method="POST", status_code=201, json={"data": {"id": "7"}}
        )

        post_id = await run(config, delay=0)

        assert post_id == "7"
        post_request = next(
            request
            for request in httpx_mock.get_requests()
            if request.method == "POST"
        )
        import json

        assert json.loads(post_request.read()) == {"text": EXPECTED_TEXT}


class TestMain:
    """Tests for the command-line entry point."""

    def test_success_exits_zero(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a completed run returns 0."""
        seen: list[BotConfig] = []

        async def fake_run(config: BotConfig) -> str:
            seen.append(config)
            return "1"

        monkeypatch.setattr(post_metrics, "run", fake_run)

        assert main(["--dry-run", "--tier", "fastestFee"]) == 0
        assert seen[0].dry_run is True
        assert seen[0].btc_tier == "fastestFee"

    def test_failure_exits_non_zero(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test a run that fails after its retry returns 1 and logs the error."""

        async def fake_run(config: BotConfig) -> str:
            raise FetchError("BTC fees", 500)

        monkeypatch.setattr(post_metrics, "run", fake_run)

        assert main([]) == 1
        assert any("BTC fees HTTP 500" in record.getMessage() for record in caplog.records)

    def test_rejects_unknown_tier(self) -> None:
        """Test argparse rejects a tier outside the table."""
        with pytest.raises(SystemExit):
            main(["--tier", "weeklyFee"])
