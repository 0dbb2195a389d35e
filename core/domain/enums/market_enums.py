from __future__ import annotations

from enum import Enum


class MarketState(str, Enum):
    PENDING = "Pending"
    ACTIVE = "Active"
    SUPERVISION = "Supervision"


class PoolType(str, Enum):
    STANDARD = "Standard"
    STABLE = "Stable"


class RateModelKind(str, Enum):
    JUMP = "Jump"
    CURVE = "Curve"
