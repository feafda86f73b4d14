"""Conversion between human-entered decimal amounts and smallest-unit integers."""

from __future__ import annotations

import re
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext

from ..errors import ErrorKind, ValidationError

_AMOUNT_RE = re.compile(r"^\d+(\.\d+)?$")


def parse_amount(amount: str | None) -> Decimal:
    """Parse a plain decimal string (no sign, exponent or thousands separators)."""
    text = (amount or "").strip()
    if not text:
        raise ValidationError(ErrorKind.INVALID_AMOUNT, "Invalid amount")
    if not _AMOUNT_RE.match(text):
        raise ValidationError(
            ErrorKind.INVALID_AMOUNT,
            "Amount must be numeric",
            details={"amount": amount},
        )
    try:
        return Decimal(text)
    except InvalidOperation as exc:  # pragma: no cover - regex already guards this
        raise ValidationError(ErrorKind.INVALID_AMOUNT, "Amount must be numeric") from exc


def amount_to_raw(amount: str | None, decimals: int) -> int:
    """Scale ``amount`` by ``10**decimals``, truncating digits the token cannot represent.

    Raises a ``ValidationError`` of kind ``ZERO_AMOUNT`` when the result truncates to nothing.
    """
    value = parse_amount(amount)
    with localcontext() as ctx:
        # Wide enough that scaling never rounds before the explicit truncation
        ctx.prec = len(str(value)) + decimals + 2
        raw = (value * (Decimal(10) ** decimals)).quantize(Decimal("1"), rounding=ROUND_DOWN)
    if raw <= 0:
        raise ValidationError(
            ErrorKind.ZERO_AMOUNT,
            "Amount must be > 0",
            details={"amount": amount, "decimals": decimals},
        )
    return int(raw)


def raw_to_amount(raw: int, decimals: int) -> str:
    """Human-readable form of a smallest-unit amount, trailing zeros stripped."""
    with localcontext() as ctx:
        ctx.prec = len(str(raw)) + decimals + 2
        value = Decimal(raw).scaleb(-decimals)
        return format(value.normalize(), "f")
