"""
Pure value converters used by the report parser and the sinks.

Turns the textual tokens printed by ``midea-beautiful-air-cli`` into typed
values (booleans and floats), and renders typed values back into the text
payloads published to the broker.

All functions are pure: no I/O, no logging, no global state.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import math
import re
from decimal import Decimal

_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
"""Plain decimal or scientific notation, nothing else (no ``_``, no ``nan``)."""


class InvalidBoolean(ValueError):
    """Raised when a token is not ``true`` or ``false`` (any letter case)."""

    def __init__(self, token: str) -> None:
        super().__init__(f"invalid boolean value: {token!r}")
        self.token = token


class InvalidNumber(ValueError):
    """Raised when a token is not a finite decimal/scientific number."""

    def __init__(self, token: str) -> None:
        super().__init__(f"invalid number: {token!r}")
        self.token = token


def convert_bool(token: str) -> bool:
    """Convert ``"true"``/``"false"`` in any letter case to a bool.

    Raises:
        InvalidBoolean: For any other token, including surrounding whitespace.
    """
    lowered = token.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise InvalidBoolean(token)


def convert_float(token: str) -> float:
    """Convert a decimal or scientific notation token to a float.

    The whole token must match; there is no partial parsing.

    Raises:
        InvalidNumber: If the token is malformed or overflows to infinity.
    """
    if _FLOAT_RE.fullmatch(token) is None:
        raise InvalidNumber(token)
    value = float(token)
    if math.isinf(value):
        raise InvalidNumber(token)
    return value


def format_float(value: float) -> str:
    """Render a float as the shortest round-trippable plain decimal.

    No exponent, no forced trailing zeros: ``20.0 -> "20"``,
    ``55.2 -> "55.2"``, ``1e-07 -> "0.0000001"``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    # repr() is the shortest round-trip form; Decimal drops exponent and zeros.
    return format(Decimal(repr(value)).normalize(), "f")


def format_value(value: bool | float) -> str:
    """Render a field value as broker payload text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return format_float(float(value))


def celsius_to_fahrenheit(celsius: float) -> float:
    """Linear Celsius to Fahrenheit conversion."""
    return celsius * 9 / 5 + 32
