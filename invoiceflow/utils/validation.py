"""Address and amount validation utilities.

Address checks are syntactic heuristics only (no checksum verification):
a well-formed address must never be rejected, an occasional malformed one
may slip through.

Amounts are handled as ``Decimal`` so the canonical string form of an
amount is exact.
"""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

MAX_SUPPLY_BTC = Decimal("21000000")
BTC_DECIMALS = 8

SEGWIT_PREFIX = "bc1"
LEGACY_PREFIXES = ("1", "3")

_SEGWIT_CHARSET = re.compile(r"[a-z0-9]+")
_BASE58_CHARSET = re.compile(r"[123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz]+")
_AMOUNT_PATTERN = re.compile(r"[0-9]+(\.[0-9]{1,8})?")

_SATOSHI = Decimal(1).scaleb(-BTC_DECIMALS)
_CENT = Decimal("0.01")


def is_valid_address(address: str) -> bool:
    """
    Check BTC address syntax.

    Rules:
    - trimmed length must be within [14, 90]
    - ``bc1`` addresses use lowercase alphanumerics only
    - legacy ``1``/``3`` addresses are 26-35 base58 characters
    - anything else is rejected
    """
    trimmed = address.strip()
    if len(trimmed) < 14 or len(trimmed) > 90:
        return False

    if trimmed.startswith(SEGWIT_PREFIX):
        return _SEGWIT_CHARSET.fullmatch(trimmed) is not None

    if trimmed.startswith(LEGACY_PREFIXES):
        if len(trimmed) < 26 or len(trimmed) > 35:
            return False
        return _BASE58_CHARSET.fullmatch(trimmed) is not None

    return False


def parse_amount(text: str) -> Optional[Decimal]:
    """
    Parse a user supplied BTC amount.

    Accepts plain decimals with at most 8 fractional digits. Returns None
    for anything else, for zero, and for values above the supply cap.
    """
    trimmed = text.strip()
    if _AMOUNT_PATTERN.fullmatch(trimmed) is None:
        return None

    try:
        parsed = Decimal(trimmed)
    except InvalidOperation:
        return None

    if not parsed.is_finite() or parsed <= 0:
        return None
    if parsed > MAX_SUPPLY_BTC:
        return None

    return parsed


def format_amount(value: Union[Decimal, int, float, str]) -> str:
    """Render an amount with 8 decimals, then strip trailing zeros and the dot."""
    fixed = f"{Decimal(str(value)).quantize(_SATOSHI, rounding=ROUND_HALF_UP):f}"
    if "." in fixed:
        fixed = fixed.rstrip("0").rstrip(".")
    return fixed


def format_usd(value: Union[Decimal, int, float, str]) -> str:
    """Render a USD value with exactly 2 decimals."""
    return f"{Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP):f}"
