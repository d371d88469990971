"""
Weighted desirability score for a carton that passed the placement simulation.

Four components, each on a 0-100 scale (weight efficiency can go negative
for cartons far too large for their payload):
- utilization: fill rate relative to the optimal fill rate, capped at 100
- weight efficiency: how far the chargeable weight drifts from the payload
- cost: linear inverse of carton cost against a reference ceiling
- protection: 0 when a fragile item would ship in an envelope-class carton
"""

from __future__ import annotations

from .config import EngineConfig
from .models import CartonScore, CartonType, ItemMetrics

EXCELLENT = "excellent"
GOOD = "good"
LOW_UTILIZATION = "low utilization warning"
MARGINAL = "marginal fit"


def utilization_score(fill_rate: float, optimal_fill_rate: float = 0.75) -> float:
    return min(100.0, fill_rate / optimal_fill_rate * 100.0)


def dimensional_weight(carton: CartonType, divisor: float = 166.0) -> float:
    return carton.volume / divisor


def chargeable_weight(
    carton: CartonType, actual_weight: float, divisor: float = 166.0
) -> float:
    """What a carrier bills: the larger of dimensional and gross weight."""
    return max(dimensional_weight(carton, divisor), actual_weight + carton.tare_weight)


def weight_efficiency_score(chargeable: float, actual_weight: float) -> float:
    return 100.0 * (1.0 - (chargeable - actual_weight) / (actual_weight + 1.0))


def cost_score(cost: float, ceiling: float = 10.0) -> float:
    return 100.0 * (1.0 - cost / ceiling)


def is_envelope(carton: CartonType, keywords=("ENVELOPE", "MAILER")) -> bool:
    name = carton.name.upper()
    return any(k in name for k in keywords)


def protection_score(
    carton: CartonType, has_fragile: bool, keywords=("ENVELOPE", "MAILER")
) -> float:
    if has_fragile and is_envelope(carton, keywords):
        return 0.0
    return 100.0


def score_carton(
    metrics: ItemMetrics, carton: CartonType, config: EngineConfig
) -> CartonScore:
    """
    Score one feasible carton for the batch summarized by `metrics`.
    """
    fill_rate = metrics.total_volume / carton.volume
    dim_weight = dimensional_weight(carton, config.dim_divisor)
    chargeable = chargeable_weight(carton, metrics.total_weight, config.dim_divisor)

    utilization = utilization_score(fill_rate, config.optimal_fill_rate)
    weight_eff = weight_efficiency_score(chargeable, metrics.total_weight)
    cost = cost_score(carton.cost, config.cost_ceiling)
    protection = protection_score(
        carton, metrics.has_fragile, config.envelope_keywords
    )

    w = config.weights
    total = (
        w.utilization * utilization
        + w.weight_efficiency * weight_eff
        + w.cost * cost
        + w.protection * protection
    )
    return CartonScore(
        utilization=utilization,
        weight_efficiency=weight_eff,
        cost=cost,
        protection=protection,
        total=total,
        fill_rate=fill_rate,
        chargeable_weight=chargeable,
        dimensional_weight=dim_weight,
    )


def recommendation_for(score: CartonScore) -> str:
    """Advisory text tier for a scored carton."""
    if score.total > 85:
        return EXCELLENT
    if score.total > 70:
        return GOOD
    if score.fill_rate < 0.40:
        return LOW_UTILIZATION
    return MARGINAL


__all__ = [
    "EXCELLENT",
    "GOOD",
    "LOW_UTILIZATION",
    "MARGINAL",
    "utilization_score",
    "dimensional_weight",
    "chargeable_weight",
    "weight_efficiency_score",
    "cost_score",
    "is_envelope",
    "protection_score",
    "score_carton",
    "recommendation_for",
]
