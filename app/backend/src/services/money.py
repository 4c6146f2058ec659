"""Decimal normalization for monetary values and quantities."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

ZERO = Decimal("0")


def to_decimal(value: object) -> Decimal:
    """Return ``value`` as an exact :class:`~decimal.Decimal`.

    Store drivers hand back sums as ``Decimal``, ``int``, ``float`` or numeric
    strings depending on the backend. Floats go through their shortest ``repr``
    so ``0.1`` becomes ``Decimal("0.1")`` rather than its binary expansion.
    ``None`` (an aggregate over zero rows) becomes zero.
    """

    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise ValueError(f"Cannot interpret boolean {value!r} as an amount.")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValueError(f"Cannot interpret {value!r} as an amount.") from exc
    else:
        raise ValueError(f"Unsupported amount type: {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}.")
    return result


def percent_change(current: Decimal, previous: Decimal) -> Decimal:
    """Growth of ``current`` over ``previous`` in percent, one decimal place.

    Defined as zero when ``previous`` is zero.
    """

    if previous == ZERO:
        return Decimal("0.0")
    growth = (current - previous) / previous * Decimal(100)
    return growth.quantize(Decimal("0.1"))


__all__ = ["ZERO", "percent_change", "to_decimal"]
