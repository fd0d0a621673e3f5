"""Parsing utilities for numbers, text and upstream payloads."""

import base64
from collections.abc import Callable, Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal
import json
import math

from typing import Any, TypeAlias

from feebot.helpers.constants import ELLIPSIS, MESSAGE_LIMIT
from feebot.helpers.errors import ParseError, ValidationError


PayloadDecoder: TypeAlias = Callable[[Any], Any]

ABBREVIATIONS = (
    (1_000_000, 1_000, "k"),
    (1_000_000_000, 1_000_000, "M"),
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity.

    Example:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(-2.5)
        -2
    """
    return math.floor(value + 0.5)


def format_number(value: float) -> str:
    """Render a number without a trailing ``.0`` for integral floats.

    Example:
        >>> format_number(3.0)
        '3'
        >>> format_number(2.5)
        '2.5'
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def abbreviate(value: float | None) -> str:
    """Abbreviate a magnitude with a k/M/B suffix and one decimal place.

    Args:
        value: Count to abbreviate, or None

    Returns:
        str: Compact representation, empty string for None

    Example:
        >>> abbreviate(999)
        '999'
        >>> abbreviate(1234)
        '1.2k'
        >>> abbreviate(2_000_000)
        '2M'
        >>> abbreviate(None)
        ''
    """
    if value is None:
        return ""

    magnitude = abs(value)
    if magnitude < 1_000:
        return format_number(value)

    divisor, suffix = 1_000_000_000, "B"
    for upper_bound, candidate_divisor, candidate_suffix in ABBREVIATIONS:
        if magnitude < upper_bound:
            divisor, suffix = candidate_divisor, candidate_suffix
            break

    scaled = (Decimal(str(value)) / divisor).quantize(
        Decimal("0.1"), rounding=ROUND_HALF_UP
    )
    return f"{scaled}".removesuffix(".0") + suffix


def clamp_to_limit(text: str, limit: int = MESSAGE_LIMIT) -> str:
    """Truncate text to ``limit`` characters, ending with an ellipsis when cut."""
    if len(text) <= limit:
        return text
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def require_numeric(value: Any, label: str) -> float:
    """Coerce a value to a finite float.

    Args:
        value: Raw value from an API response
        label: Name used in the error message

    Returns:
        float: Coerced value

    Raises:
        ValidationError: If the value is not numeric or not finite
    """
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        msg = f"{label} is not numeric: {value!r}"
        raise ValidationError(msg) from e

    if not math.isfinite(number):
        msg = f"{label} is not finite: {value!r}"
        raise ValidationError(msg)
    return number


def require_key(obj: Any, key: str, hint: str = "") -> Any:
    """Return ``obj[key]``, failing when the key is absent.

    A present key with a falsy value is returned as-is.

    Raises:
        ValidationError: If obj is not a mapping or lacks the key
    """
    if not isinstance(obj, Mapping) or key not in obj:
        msg = f"Missing key {key}" + (f" ({hint})" if hint else "")
        raise ValidationError(msg)
    return obj[key]


def decode_json(payload: Any) -> Any:
    """Parse the payload as raw JSON text."""
    return json.loads(payload)


def decode_base64_json(payload: Any) -> Any:
    """Parse the payload as base64-encoded UTF-8 JSON text."""
    text = str(payload).strip()
    text += "=" * (-len(text) % 4)
    return json.loads(base64.b64decode(text).decode("utf-8"))


PAYLOAD_DECODERS: tuple[PayloadDecoder, ...] = (decode_json, decode_base64_json)


def decode_payload(
    payload: Any,
    strategies: Sequence[PayloadDecoder] = PAYLOAD_DECODERS,
    *,
    label: str = "payload",
) -> Any:
    """Decode a payload of unannounced format by trying strategies in order.

    Args:
        payload: Raw payload value
        strategies: Decoders tried in order; the first success wins
        label: Name used in the error message

    Returns:
        The first successfully decoded value

    Raises:
        ParseError: If every strategy fails

    Example:
        >>> decode_payload('{"a": 1}')
        {'a': 1}
        >>> decode_payload("eyJhIjogMX0=")
        {'a': 1}
    """
    failures: list[str] = []
    for strategy in strategies:
        try:
            return strategy(payload)
        except (TypeError, ValueError) as e:
            failures.append(f"{strategy.__name__}: {e}")

    msg = f"{label} parse failed ({'; '.join(failures)})"
    raise ParseError(msg)


__all__ = [
    "PAYLOAD_DECODERS",
    "abbreviate",
    "clamp_to_limit",
    "decode_base64_json",
    "decode_json",
    "decode_payload",
    "format_number",
    "require_key",
    "require_numeric",
    "round_half_up",
]
