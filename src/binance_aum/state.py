"""Application state container."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .clients import BinanceClient
from .settings import AumSettings


@dataclass
class AppState:
    """Container for application-wide state and dependencies.

    Passed through the pipeline to avoid global state and enable testing.
    The Binance client is created on first use so tests can inject a fake.
    """

    settings: AumSettings
    logger: logging.Logger
    client: BinanceClient | None = None

    @property
    def binance(self) -> BinanceClient:
        if self.client is None:
            self.client = BinanceClient.from_settings(self.settings)
        return self.client
