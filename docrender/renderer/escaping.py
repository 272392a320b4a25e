"""HTML escaping, link-target allow-listing and value stringification.

These three helpers define the exact text that ends up in the output, so
their behaviour is shared with every other renderer of the same documents.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

_ESCAPE_TABLE = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
})

SAFE_HREF_PREFIXES: tuple[str, ...] = ("https://", "http://", "mailto:", "#")

# Integers from this magnitude on print in exponent notation.
_EXPONENT_THRESHOLD = 10 ** 21


def escape_html(text: str) -> str:
    """Escape *text* for element content and double-quoted attribute values.

    Not idempotent: an already-escaped string is escaped again, so callers
    must escape exactly once.
    """
    return text.translate(_ESCAPE_TABLE)


def safe_href(raw: str) -> str:
    """Return the escaped link target, or ``""`` for a disallowed scheme.

    Only ``https://``, ``http://``, ``mailto:`` and fragment (``#``) targets
    survive; anything else (``javascript:``, ``data:``, relative paths)
    disables the link instead of raising.
    """
    if raw.startswith(SAFE_HREF_PREFIXES):
        return escape_html(raw)
    return ""


def stringify(value: Any) -> str:
    """Convert a context value to display text.

    Mirrors how the browser-side renderer prints JSON values, so both sides
    produce the same characters: booleans are lower-case, integral floats
    drop the ``.0``, numbers switch to exponent notation at the same
    magnitudes JavaScript does, and lists are comma-joined.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return _format_number(value)
    if isinstance(value, int) and abs(value) >= _EXPONENT_THRESHOLD:
        try:
            return _format_number(float(value))
        except OverflowError:
            return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return "[object Object]"
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    return str(value)


def _format_number(value: float) -> str:
    """Lay out a finite number the way ECMAScript ``Number::toString`` does.

    ``repr`` already yields the shortest round-tripping digits; only the
    placement differs.  Plain notation is used for decimal exponents from
    -6 to 20, exponent notation (``1e-7``, ``1.5e+21``) outside that range.
    """
    if value == 0:
        return "0"
    sign, digit_tuple, exponent = Decimal(repr(float(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = exponent + k
    prefix = "-" if sign else ""

    if k <= n <= 21:
        return prefix + digits + "0" * (n - k)
    if 0 < n <= 21:
        return prefix + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return prefix + "0." + "0" * -n + digits

    e = n - 1
    mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
    return f"{prefix}{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"
