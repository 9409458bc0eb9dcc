"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import (
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    BINANCE_API_URL,
    BINANCE_FAPI_URL,
    BINANCE_PAPI_URL,
    DEFAULT_BRIDGE_ASSETS,
    DEFAULT_PEGGED_ASSETS,
    DEFAULT_REFERENCE_CURRENCY,
    DEFAULT_REPORT_DECIMALS,
    DEFAULT_UM_POSITIONS,
)
from .domain import WalletType

load_dotenv()

SECRET_FIELDS = {"api_key", "api_secret"}


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


def _upper_symbols(values: list[str]) -> list[str]:
    symbols = [v.strip().upper() for v in values if v and v.strip()]
    return list(dict.fromkeys(symbols))


class AumSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with BINANCE_AUM_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- credentials ---
    api_key: SecretStr | None = None
    api_secret: SecretStr | None = None

    # --- endpoints ---
    api_base_url: str = BINANCE_API_URL
    fapi_base_url: str = BINANCE_FAPI_URL
    papi_base_url: str = BINANCE_PAPI_URL
    request_timeout: float = Field(default=10.0, gt=0)
    recv_window: int = Field(default=5000, gt=0, le=60000)
    max_request_tries: int = Field(default=5, ge=1)

    # --- valuation ---
    reference_currency: str = DEFAULT_REFERENCE_CURRENCY
    bridge_assets: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BRIDGE_ASSETS)
    )
    pegged_assets: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_PEGGED_ASSETS)
    )
    wallets: list[WalletType] = Field(
        default_factory=lambda: [WalletType.SPOT, WalletType.PORTFOLIO_MARGIN]
    )
    tracked_assets: list[str] = Field(
        default_factory=list,
        description="Only value these assets. Empty means every non-zero balance.",
    )
    um_positions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_UM_POSITIONS)
    )
    allow_negative_aum: bool = False
    report_decimals: int = Field(default=DEFAULT_REPORT_DECIMALS, ge=0, le=18)

    # --- retries and timeouts ---
    price_retries: int = Field(default=2, ge=0)
    price_retry_interval: float = Field(default=2.0, ge=0)
    global_timeout_seconds: float | None = 60.0

    # --- periodic mode ---
    loop: bool = False
    interval_seconds: float = Field(default=30.0, gt=0)

    # --- output / logging ---
    output_format: OutputFormat = OutputFormat.TABLE
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="BINANCE_AUM_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("api_key", "api_secret", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr, treating blanks as unset."""
        if v is None or isinstance(v, SecretStr):
            return v
        if isinstance(v, str) and not v.strip():
            return None
        return SecretStr(v)

    @field_validator("reference_currency")
    @classmethod
    def normalize_reference(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("reference_currency must not be empty")
        return v

    @field_validator("bridge_assets", "tracked_assets", "um_positions")
    @classmethod
    def normalize_symbol_lists(cls, v: list[str]) -> list[str]:
        return _upper_symbols(v)

    @field_validator("pegged_assets")
    @classmethod
    def normalize_pegs(cls, v: dict[str, str]) -> dict[str, str]:
        return {k.strip().upper(): t.strip().upper() for k, t in v.items()}

    @field_validator("api_base_url", "fapi_base_url", "papi_base_url")
    @classmethod
    def trim_base_url(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @field_validator("wallets")
    @classmethod
    def require_wallets(cls, v: list[WalletType]) -> list[WalletType]:
        if not v:
            raise ValueError("at least one wallet must be enabled")
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def validate_price_paths(self) -> "AumSettings":
        """Bridges and pegs must not point back at themselves."""
        self.bridge_assets = [
            b for b in self.bridge_assets if b != self.reference_currency
        ]
        for asset, target in self.pegged_assets.items():
            if asset == target:
                raise ValueError(f"pegged asset {asset} cannot be pegged to itself")
            if target in self.pegged_assets:
                raise ValueError(
                    f"pegged asset {asset} targets {target}, which is itself pegged"
                )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("BINANCE_AUM_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    # Try default locations
                    local_config = Path("binance-aum.toml")
                    user_config = (
                        Path.home() / ".config" / "binance-aum" / "config.toml"
                    )
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [binance_aum]
                body = data.get("binance_aum", data)
                if not isinstance(body, dict):
                    return {}

                for key in SECRET_FIELDS:
                    if key in body:
                        raise ValueError(
                            f"Security violation: '{key}' found in TOML config file. "
                            f"Secrets must only be provided via environment variables."
                        )

                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-friendly dict with secrets redacted."""
        data = self.model_dump(mode="json")
        for key in SECRET_FIELDS:
            if getattr(self, key):
                data[key] = "***redacted***"
        return data

    @property
    def has_credentials(self) -> bool:
        return self.api_key is not None and self.api_secret is not None

    @property
    def api_key_required(self) -> str:
        """Get api_key, raising ValueError if not set."""
        if self.api_key is None:
            raise ValueError("api_key must be configured")
        return self.api_key.get_secret_value()

    @property
    def api_secret_required(self) -> str:
        """Get api_secret, raising ValueError if not set."""
        if self.api_secret is None:
            raise ValueError("api_secret must be configured")
        return self.api_secret.get_secret_value()
