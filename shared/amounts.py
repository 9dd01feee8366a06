"""
Conversion of on-chain amounts for display in the CAPTCHA prompt.

Purchase amounts arrive in yoctoNEAR (10^-24 NEAR), usually as a decimal
string because they overflow a double. Decimal keeps the conversion exact.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

YOCTO_PER_NEAR = Decimal(10) ** 24
DISPLAY_PLACES = Decimal("0.0001")


def yocto_to_display(amount: Any) -> str:
    """Convert a yoctoNEAR amount into a 4-decimal NEAR string.

    Returns ``"0"`` when ``amount`` is missing, empty, or not a finite number.

    >>> yocto_to_display("1500000000000000000000000")
    '1.5000'
    >>> yocto_to_display(None)
    '0'
    """
    if amount is None or isinstance(amount, bool) or amount == "":
        return "0"
    try:
        value = Decimal(str(amount).strip())
        if not value.is_finite():
            return "0"
        display = (value / YOCTO_PER_NEAR).quantize(DISPLAY_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return "0"
    return str(display)
