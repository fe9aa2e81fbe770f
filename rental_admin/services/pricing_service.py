from __future__ import annotations

import math
from typing import Any


FREE_KM = 50
EXTRA_KM_RATE = 3


def to_amount(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def extra_km_charge(km: Any) -> float:
    return max(0.0, to_amount(km) - FREE_KM) * EXTRA_KM_RATE


def compute_total(unit_weekend_price: Any, quantity: Any, km: Any) -> float:
    """Weekend price times quantity, plus the surcharge for every km past the free allowance.

    Missing or non-numeric inputs count as zero so a half-filled form still prices.
    """
    base = to_amount(unit_weekend_price) * to_amount(quantity)
    return base + extra_km_charge(km)
