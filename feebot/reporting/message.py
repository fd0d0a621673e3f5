"""Post text for one run of BTC and BSV metrics."""

from feebot.helpers.constants import MESSAGE_LIMIT
from feebot.helpers.models import NetworkMetrics
from feebot.helpers.parsers import abbreviate, clamp_to_limit, format_number


def build_message(
    btc: NetworkMetrics, bsv: NetworkMetrics, explainer_url: str = ""
) -> str:
    """Render the three metric lines plus an optional link line.

    Args:
        btc: Bitcoin figures
        bsv: Bitcoin SV figures
        explainer_url: Appended as ``More: <url>`` when non-empty

    Returns:
        str: Newline-joined text, at most 280 characters

    Example:
        ```
        BTC fee:1400s ~60m | BSV fee:226s ~20m
        1KB data — BTC:10000s | BSV:1000s
        Backlog — BTC:12.3ktx(~2.5b) | BSV:50ktx(~2b)
        ```
    """
    lines = [
        f"BTC fee:{btc.simple_fee}s ~{btc.eta_minutes}m"
        f" | BSV fee:{bsv.simple_fee}s ~{bsv.eta_minutes}m",
        f"1KB data — BTC:{btc.one_kb_fee}s | BSV:{bsv.one_kb_fee}s",
        f"Backlog — BTC:{abbreviate(btc.backlog_count)}tx(~{format_number(btc.backlog_blocks)}b)"
        f" | BSV:{abbreviate(bsv.backlog_count)}tx(~{format_number(bsv.backlog_blocks)}b)",
    ]
    if explainer_url:
        lines.append(f"More: {explainer_url}")

    return clamp_to_limit("\n".join(lines), MESSAGE_LIMIT)


__all__ = ["build_message"]
