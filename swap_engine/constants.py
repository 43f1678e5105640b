"""Protocol constants for the quoting engine.

Centralizes fee tiers, sentinels and the selection thresholds.
"""

from decimal import Decimal

# Sentinel returned by factories for pairs without a deployed pool
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Fixed binary scale of sqrt prices (Q64.96)
Q96 = 2**96

# Concentrated-liquidity fee tiers in hundredths of a basis point
# Fee = units / 1,000,000 (e.g., 3000 = 0.3%)
V3_FEE_LOWEST = 100  # 0.01%
V3_FEE_LOW = 500  # 0.05%
V3_FEE_MEDIUM = 3000  # 0.30%
V3_FEE_HIGH = 10000  # 1.00%

# Enumeration order is also the tie-break order of the selector
V3_FEE_TIERS: tuple[int, ...] = (V3_FEE_LOWEST, V3_FEE_LOW, V3_FEE_MEDIUM, V3_FEE_HIGH)

V3_FEE_DENOMINATOR = 1_000_000

# Constant-product pools charge their fee in parts per thousand
V2_FEE_PER_MILLE = 3
V2_FEE_DENOMINATOR = 1000
# Fee tier reported for a V2 route (0.3% expressed in V3 units)
V2_FEE_TIER = V2_FEE_PER_MILLE * (V3_FEE_DENOMINATOR // V2_FEE_DENOMINATOR)

# Selection policy thresholds
MAX_PREFERRED_PRICE_IMPACT = Decimal(1)  # percent, strict upper bound
LOW_FEE_TIER_CEILING = V3_FEE_MEDIUM  # fee tiers <= 0.30% are preferred

# Slippage
HIGH_SLIPPAGE_PERCENT = Decimal(5)
SLIPPAGE_SCALE = 100  # two decimal places
BPS_DENOMINATOR = 10_000

# Route cache
ROUTE_CACHE_TTL_SECONDS = 20.0

# Mainnet defaults for the web3 source (overridable via configuration)
V2_FACTORY_ADDRESS = "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f"
V3_FACTORY_ADDRESS = "0x1F98431c8aD98523631AE4a59f267346ea31F984"
QUOTER_V2_ADDRESS = "0x61fFE014bA17989E743c5F6cB21bF9697530B21e"
