"""Exchange endpoints and valuation defaults."""

from decimal import Decimal

BINANCE_API_URL = "https://api.binance.com"
BINANCE_FAPI_URL = "https://fapi.binance.com"
BINANCE_PAPI_URL = "https://papi.binance.com"

DEFAULT_REFERENCE_CURRENCY = "USDT"
DEFAULT_BRIDGE_ASSETS = ["BTC"]

# Wrapped assets priced as their underlying
DEFAULT_PEGGED_ASSETS = {"WBTC": "BTC"}

DEFAULT_UM_POSITIONS = ["BTCUSDT", "ETHUSDT", "SOLUSDT"]

# Significant digits for every rate and value computation
DECIMAL_PRECISION = 40

# Fractional digits kept on derived (inverted or bridged) rates
RATE_DECIMALS = 18
RATE_QUANTUM = Decimal(1).scaleb(-RATE_DECIMALS)

# Scaled integer total, e.g. 8 decimals for satoshi-style units
DEFAULT_REPORT_DECIMALS = 8
