"""HTTP client utilities and helpers."""

from asyncio import sleep
from collections.abc import Awaitable, Callable
from functools import wraps

from typing import Any, ParamSpec, TypeVar

import httpx

from feebot.helpers.constants import DEFAULT_TIMEOUT, MAX_ATTEMPTS, RETRY_DELAY
from feebot.helpers.errors import FetchError, ParseError
from feebot.helpers.logging import get_logger


logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

JSON_HEADERS = {"Accept": "application/json"}


def retry_with_fixed_delay(
    max_attempts: int = MAX_ATTEMPTS,
    delay: float = RETRY_DELAY,
    *,
    log_errors: bool = True,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator to re-run an async function after a fixed pause.

    Args:
        max_attempts: Total number of attempts, first run included (default: 2)
        delay: Pause between attempts in seconds (default: 2.0)
        log_errors: Whether to log failed attempts (default: True)

    Returns:
        Decorated function that re-raises the last error once attempts run out

    Example:
        ```python
        from feebot.helpers.http import retry_with_fixed_delay

        @retry_with_fixed_delay(max_attempts=2, delay=2.0)
        async def post_once() -> str:
            ...

        # Runs once, and on any error once more after 2s
        ```
    """
    if max_attempts < 1:
        msg = "max_attempts must be at least 1"
        raise ValueError(msg)

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if attempt == max_attempts:
                        if log_errors:
                            logger.error(
                                "%s failed after %d attempts: %s",
                                func.__name__,
                                max_attempts,
                                e,
                            )
                        raise
                    if log_errors:
                        logger.warning(
                            "%s failed (attempt %d/%d): %s; retrying in %.1fs",
                            func.__name__,
                            attempt,
                            max_attempts,
                            e,
                            delay,
                        )
                await sleep(delay)

            # Unreachable: the last attempt either returns or raises
            msg = f"{func.__name__} failed without exception"
            raise RuntimeError(msg)

        return wrapper

    return decorator


def create_http_client(
    timeout: float = DEFAULT_TIMEOUT, **kwargs: Any
) -> httpx.AsyncClient:
    """Create a configured httpx AsyncClient.

    Args:
        timeout: Default timeout in seconds (default: DEFAULT_TIMEOUT)
        **kwargs: Additional httpx.AsyncClient kwargs

    Returns:
        Configured AsyncClient instance

    Example:
        ```python
        from feebot.helpers.http import create_http_client

        async with create_http_client() as client:
            fees = await fetch_json(client, BTC_FEES_URL, endpoint="BTC fees")
        ```
    """
    return httpx.AsyncClient(timeout=timeout, **kwargs)


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    endpoint: str,
    timeout: float | None = None,
) -> Any:
    """GET a JSON document.

    Args:
        client: HTTP client instance
        url: URL to fetch
        endpoint: Short endpoint name used in errors and logs
        timeout: Optional timeout override

    Returns:
        Parsed JSON data

    Raises:
        FetchError: On transport failure or non-success status
        ParseError: If the body is not valid JSON
    """
    request_kwargs: dict[str, Any] = {"headers": JSON_HEADERS}
    if timeout is not None:
        request_kwargs["timeout"] = timeout

    try:
        response = await client.get(url, **request_kwargs)
    except httpx.HTTPError as e:
        raise FetchError(endpoint, None, str(e) or type(e).__name__) from e

    if not response.is_success:
        logger.debug("%s returned %s: %s", endpoint, response.status_code, response.text[:100])
        raise FetchError(endpoint, response.status_code, response.text[:200])

    try:
        return response.json()
    except ValueError as e:
        msg = f"{endpoint} returned invalid JSON: {e}"
        raise ParseError(msg) from e


__all__ = [
    "JSON_HEADERS",
    "create_http_client",
    "fetch_json",
    "retry_with_fixed_delay",
]
