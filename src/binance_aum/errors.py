"""Exceptions raised while building an AUM valuation."""

from __future__ import annotations

from decimal import Decimal


class AumError(Exception):
    """Base class for valuation failures.

    ``retry_recommended`` tells the caller whether re-fetching upstream data
    may help. The core never retries on its own.
    """

    retry_recommended: bool = False


class MalformedBalance(AumError, ValueError):
    """Raised when a raw balance field is not a finite, non-negative decimal."""

    def __init__(self, asset: str, wallet: str, field: str, value: object):
        self.asset = asset
        self.wallet = wallet
        self.field = field
        self.value = value
        super().__init__(
            f"Malformed {field} for {asset or '<blank>'} in {wallet} wallet: {value!r}"
        )


class UnresolvablePrice(AumError):
    """Raised when no direct, inverse, or bridged quote exists for an asset."""

    retry_recommended = True

    def __init__(self, asset: str, reference: str):
        self.asset = asset
        self.reference = reference
        super().__init__(f"No price path from {asset} to {reference}")


class MissingPrice(AumError):
    """Raised when the calculator finds an asset absent from the price table."""

    def __init__(self, asset: str):
        self.asset = asset
        super().__init__(f"Price table has no entry for {asset}")


class NegativeAum(AumError):
    """Raised when the computed total is below zero and that is not allowed."""

    def __init__(self, total: Decimal, reference: str):
        self.total = total
        self.reference = reference
        super().__init__(f"Negative AUM computed: {total} {reference}")


class BinanceAPIError(Exception):
    """Non-retryable error response from the Binance REST API."""

    def __init__(self, status: int, code: int | None, msg: str):
        self.status = status
        self.code = code
        self.msg = msg
        if code is None:
            super().__init__(f"Binance HTTP {status}: {msg}")
        else:
            super().__init__(f"Binance HTTP {status}: code={code} msg={msg}")
