"""Deterministic serialization used as the signing input.

The canonical form is compact JSON with every object's keys sorted by
ordinal (codepoint) comparison and arrays left in their original
order.  Numbers use the shortest round-trip form with JavaScript's
notation rules, so ``1.0`` and ``1`` sign identically and ``1e-7`` is
never written ``1e-07``.  It is only ever fed to the signer and
verifier; files and embedded payloads use the persisted form from
``signed``.
"""

from __future__ import annotations

import json
import math
from typing import Any

from utils import encode_utf8


def _format_float(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"Out of range float values are not JSON compliant: {value!r}")

    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    mantissa, _, exponent = repr(abs(value)).partition("e")
    whole, _, fraction = mantissa.partition(".")
    all_digits = whole + fraction

    # Value is 0.<digits> * 10**point.
    point = len(whole) + int(exponent or 0)
    digits = all_digits.lstrip("0")
    point -= len(all_digits) - len(digits)
    digits = digits.rstrip("0")
    count = len(digits)

    if count <= point <= 21:
        text = digits + "0" * (point - count)
    elif 0 < point <= 21:
        text = digits[:point] + "." + digits[point:]
    elif -6 < point <= 0:
        text = "0." + "0" * -point + digits
    else:
        power = point - 1
        head = digits[0] + ("." + digits[1:] if count > 1 else "")
        text = f"{head}e{'+' if power >= 0 else '-'}{abs(power)}"

    return sign + text


def _encode_value(value: Any) -> str:
    if value is None:
        return "null"

    if value is True:
        return "true"

    if value is False:
        return "false"

    if isinstance(value, int):
        return str(value)

    if isinstance(value, float):
        return _format_float(value)

    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)

    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_encode_value(entry) for entry in value) + "]"

    if isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                raise TypeError(f"Keys must be str, not {type(key).__name__}")
        # str ordering is by codepoint, independent of locale.
        members = (
            json.dumps(key, ensure_ascii=False) + ":" + _encode_value(value[key])
            for key in sorted(value)
        )
        return "{" + ",".join(members) + "}"

    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonicalize(value: Any) -> bytes:
    """
    Serialize any JSON-compatible value to canonical UTF-8 bytes.

    Args:
        value: Mapping, sequence or scalar built from JSON types.

    Returns:
        Compact, key-sorted JSON encoded as UTF-8.

    Raises:
        TypeError: If a key is not a string or a value is not JSON-serializable.
        ValueError: If the value contains NaN or infinity.
        ArrError: ``malformed`` if a string holds a lone surrogate.
    """
    return encode_utf8(_encode_value(value))


def canonicalize_attestation(attestation: dict[str, Any]) -> bytes:
    """Canonical signing bytes for an attestation document."""
    return canonicalize(attestation)
