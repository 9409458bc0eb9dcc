from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_HALF_EVEN, Context, Decimal, localcontext

from .constants import DECIMAL_PRECISION, RATE_QUANTUM


def valuation_context():
    """Return a local decimal context for rate and value arithmetic.

    Usage::

        with valuation_context():
            value = quantity * rate
    """
    return localcontext(Context(prec=DECIMAL_PRECISION, rounding=ROUND_HALF_EVEN))


def quantize_rate(rate: Decimal) -> Decimal:
    """Round a derived rate to the fixed rate precision (banker's rounding)."""
    with valuation_context():
        return rate.quantize(RATE_QUANTUM, rounding=ROUND_HALF_EVEN)


def to_scaled_units(value: Decimal, decimals: int) -> int:
    """Convert a decimal amount to integer units of ``10**-decimals``.

    Args:
        value: Amount to convert.
        decimals: Number of fractional digits the integer represents.

    Returns:
        The scaled amount, truncated toward zero.

    Notes:
        - ``to_scaled_units(Decimal("1.234567891"), 8)`` is ``123456789``.
        - Negative values truncate toward zero as well.
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    with valuation_context():
        scaled = value.scaleb(decimals)
        return int(scaled.to_integral_value(rounding=ROUND_DOWN))
