# src/fanledger/ledger/constants.py
from __future__ import annotations

"""Ledger constants.

Reference distribution:
- Five fixed recipients: 5500 / 500 / 500 / 1500 / 500 bp (75%)
- Three dynamic recipients: 1000 / 300 / 200 bp (15%)
- Penalty decays from 50% to 0% between year 1 and year 5 of holding
"""

# Asset precision (1 unit = 1e-6 minor units)
ASSET_DECIMALS: int = 6
UNIT: int = 10**ASSET_DECIMALS

# Basis points
BPS_DENOMINATOR: int = 10_000

FIXED_WEIGHTS_BPS: tuple[int, ...] = (5500, 500, 500, 1500, 500)
DYNAMIC_WEIGHTS_BPS: tuple[int, ...] = (1000, 300, 200)

FIXED_RECIPIENT_COUNT: int = len(FIXED_WEIGHTS_BPS)
DYNAMIC_RECIPIENT_COUNT: int = len(DYNAMIC_WEIGHTS_BPS)
LEG_COUNT: int = FIXED_RECIPIENT_COUNT + DYNAMIC_RECIPIENT_COUNT

# Day-count convention: 365-day years, no leap days
SECONDS_PER_DAY: int = 86_400
YEAR_SECONDS: int = 365 * SECONDS_PER_DAY

MAX_PENALTY_BPS: int = 5000
PENALTY_FLAT_UNTIL: int = 1 * YEAR_SECONDS
PENALTY_ZERO_FROM: int = 5 * YEAR_SECONDS
PENALTY_DECAY_WINDOW: int = PENALTY_ZERO_FROM - PENALTY_FLAT_UNTIL

NULL_ADDRESS: str = "0x0000000000000000000000000000000000000000"

# Routing policy for the three dynamic legs of a deposit
ROUTING_REGISTRY: str = "registry"
ROUTING_PER_DEPOSIT: str = "per_deposit"
ROUTING_POLICIES = (ROUTING_REGISTRY, ROUTING_PER_DEPOSIT)

DEFAULT_OPERATOR_ADDRESS: str = "fanledger"
