"""Error taxonomy for a metrics run.

Every error propagates to the orchestrator, which retries the whole run once.
"""


class MetricsBotError(Exception):
    """Base class for all metrics bot failures."""


class ConfigError(MetricsBotError):
    """Required configuration or credential is missing."""


class FetchError(MetricsBotError):
    """Upstream API answered with a non-success status or was unreachable."""

    def __init__(self, endpoint: str, status_code: int | None, detail: str = "") -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        self.detail = detail
        if status_code is None:
            msg = f"{endpoint} request failed: {detail}"
        else:
            msg = f"{endpoint} HTTP {status_code}"
        super().__init__(msg)


class ParseError(MetricsBotError):
    """Response body could not be decoded."""


class ValidationError(MetricsBotError):
    """A required field is absent or not a finite number."""


class AuthError(MetricsBotError):
    """Posting platform rejected the identity check."""

    def __init__(self, message: str, detail: str = "") -> None:
        self.detail = detail
        super().__init__(f"{message}: {detail}" if detail else message)


class PostError(MetricsBotError):
    """Posting platform rejected or did not confirm the post."""

    def __init__(self, message: str, detail: str = "") -> None:
        self.detail = detail
        super().__init__(f"{message}: {detail}" if detail else message)


__all__ = [
    "AuthError",
    "ConfigError",
    "FetchError",
    "MetricsBotError",
    "ParseError",
    "PostError",
    "ValidationError",
]
