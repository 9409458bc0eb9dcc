"""Binance REST client for account balances and ticker prices."""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Any
from urllib.parse import urlencode

import backoff
import requests

from ..constants import BINANCE_API_URL, BINANCE_FAPI_URL, BINANCE_PAPI_URL
from ..errors import BinanceAPIError
from ..logger import get_logger
from ..settings import AumSettings

logger = get_logger(__name__)

RETRYABLE_STATUS = {429}


def _ts_ms() -> int:
    return int(time.time() * 1000)


def sign_query(query: str, secret: str) -> str:
    """Return the hex HMAC-SHA256 signature Binance expects for ``query``."""
    return hmac.new(
        secret.encode("utf-8"), query.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, requests.exceptions.HTTPError):
        response = exc.response
        return response is not None and (
            response.status_code in RETRYABLE_STATUS or response.status_code >= 500
        )
    return True


class BinanceClient:
    """Thin wrapper over the spot, margin, futures and portfolio-margin APIs.

    Every call is synchronous; async callers should go through
    ``asyncio.to_thread``. Connection errors, 429 and 5xx responses are
    retried with exponential backoff, anything else raises
    :class:`BinanceAPIError`.
    """

    def __init__(
        self,
        api_key: str | None,
        api_secret: str | None,
        *,
        api_base_url: str = BINANCE_API_URL,
        fapi_base_url: str = BINANCE_FAPI_URL,
        papi_base_url: str = BINANCE_PAPI_URL,
        timeout: float = 10.0,
        recv_window: int = 5000,
        max_tries: int = 5,
        session: requests.Session | None = None,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.fapi_base_url = fapi_base_url.rstrip("/")
        self.papi_base_url = papi_base_url.rstrip("/")
        self.api_secret = api_secret or ""
        self.timeout = float(timeout)
        self.recv_window = int(recv_window)

        self.session = session or requests.Session()
        if api_key:
            self.session.headers.update({"X-MBX-APIKEY": api_key})

        self._get = backoff.on_exception(
            backoff.expo,
            requests.exceptions.RequestException,
            max_tries=max_tries,
            giveup=lambda e: not _is_retryable(e),
            jitter=backoff.full_jitter,
            logger=logger,
        )(self._get_once)

    @classmethod
    def from_settings(cls, settings: AumSettings) -> BinanceClient:
        return cls(
            settings.api_key_required,
            settings.api_secret_required,
            api_base_url=settings.api_base_url,
            fapi_base_url=settings.fapi_base_url,
            papi_base_url=settings.papi_base_url,
            timeout=settings.request_timeout,
            recv_window=settings.recv_window,
            max_tries=settings.max_request_tries,
        )

    def _sign_params(self, params: dict[str, Any]) -> dict[str, Any]:
        """Return a new dict with recvWindow, timestamp and signature added."""
        if not self.api_secret:
            raise ValueError("Binance signed request requires api_secret")

        signed = dict(params)
        signed.setdefault("recvWindow", self.recv_window)
        signed["timestamp"] = _ts_ms()
        signed["signature"] = sign_query(urlencode(signed, doseq=True), self.api_secret)
        return signed

    def _get_once(
        self,
        base_url: str,
        path: str,
        params: dict[str, Any] | None = None,
        signed: bool = False,
    ) -> Any:
        url = f"{base_url}{path}"
        query = dict(params or {})
        if signed:
            # Signed per attempt so retries carry a fresh timestamp
            query = self._sign_params(query)

        logger.debug("GET %s", url)
        response = self.session.get(url, params=query, timeout=self.timeout)

        status = response.status_code
        if status in RETRYABLE_STATUS or status >= 500:
            logger.warning("Binance %d on %s, retrying", status, path)
            response.raise_for_status()

        if status >= 400:
            try:
                payload = response.json()
            except ValueError:
                raise BinanceAPIError(status, None, response.text[:500])
            if isinstance(payload, dict):
                raise BinanceAPIError(
                    status, payload.get("code"), str(payload.get("msg", ""))
                )
            raise BinanceAPIError(status, None, str(payload)[:500])

        return response.json() if response.text else {}

    # --- public ---

    def ticker_prices(self) -> list[dict[str, str]]:
        """Latest price for every listed symbol."""
        return self._get(self.api_base_url, "/api/v3/ticker/price")

    # --- signed ---

    def spot_account(self) -> dict[str, Any]:
        return self._get(
            self.api_base_url,
            "/api/v3/account",
            {"omitZeroBalances": "true"},
            signed=True,
        )

    def margin_account(self) -> dict[str, Any]:
        return self._get(self.api_base_url, "/sapi/v1/margin/account", signed=True)

    def futures_balances(self) -> list[dict[str, Any]]:
        return self._get(self.fapi_base_url, "/fapi/v2/balance", signed=True)

    def pm_balances(self) -> list[dict[str, Any]]:
        return self._get(self.papi_base_url, "/papi/v1/balance", signed=True)

    def pm_account_info(self) -> dict[str, Any]:
        return self._get(self.papi_base_url, "/papi/v1/account", signed=True)

    def um_positions(self) -> list[dict[str, Any]]:
        return self._get(self.papi_base_url, "/papi/v1/um/positionRisk", signed=True)
