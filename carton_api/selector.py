# carton_api/selector.py
"""
Carton selection: single best carton, multi-carton split and ranked alternatives.

Pipeline for one batch:
    items -> aggregate_metrics -> passes_admission (per carton type)
          -> place_items (per surviving carton type) -> score_carton
          -> max score

A CartonSelector holds nothing but its (frozen) EngineConfig, so one instance
can serve concurrent calls. Geometric infeasibility is never raised: it comes
back as NO_FIT, as a failed PackingResult, or as unpacked items in a
SplitResult. Only malformed input raises InvalidInputError.
"""

from __future__ import annotations

import logging
from math import ceil
from typing import Any, Dict, List, Optional, Sequence, Union

from .config import EngineConfig
from .models import (
    NO_FIT,
    Carton,
    CartonBuilder,
    CartonType,
    InvalidInputError,
    NoFit,
    PackItem,
    SplitResult,
    Suggestion,
)
from .packing import (
    aggregate_metrics,
    fits_in_carton,
    orientations_of,
    passes_admission,
    place_items,
    require_items,
)
from .scoring import recommendation_for, score_carton

logger = logging.getLogger(__name__)

ALGORITHM_NAME = "first-fit-guillotine"


class CartonSelector:
    """
    Chooses cartons from a catalog for batches of PackItems.

    Usage:
        selector = CartonSelector()               # default catalog
        carton = selector.select_optimal_carton(items)
        if not carton:                            # NO_FIT
            result = selector.split_into_multiple_cartons(items)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        catalog: Optional[Sequence[CartonType]] = None,
    ) -> None:
        config = config or EngineConfig()
        if catalog is not None:
            config = config.with_catalog(catalog)
        self.config = config

    @property
    def catalog(self):
        return self.config.catalog

    # ----------------------------
    # Candidate filter + placement + scoring
    # ----------------------------

    def feasible_candidates(self, items: Sequence[PackItem]) -> List[Carton]:
        """
        Every catalog carton that admits the batch and passes the placement
        simulation, scored, in catalog order.
        """
        batch = require_items(items)
        metrics = aggregate_metrics(batch)
        candidates: List[Carton] = []

        for ct in self.catalog:
            if not passes_admission(metrics, ct, self.config.volume_margin):
                logger.debug(
                    "%s rejected: weight %.2f / volume %.1f over limits",
                    ct.name,
                    metrics.total_weight,
                    metrics.total_volume,
                )
                continue

            result = place_items(batch, ct)
            if not result.success:
                logger.debug(
                    "%s rejected: item %s %s",
                    ct.name,
                    result.failed_item.product_id,
                    result.reason,
                )
                continue

            score = score_carton(metrics, ct, self.config)
            candidates.append(CartonBuilder(ct).extend(result.placements).build(score))

        return candidates

    # ----------------------------
    # Entry points
    # ----------------------------

    def select_optimal_carton(
        self, items: Sequence[PackItem]
    ) -> Union[Carton, NoFit]:
        """
        Return the best-scoring single carton for `items`, or NO_FIT.

        Ties keep the carton that comes first in the catalog.
        """
        batch = require_items(items)
        candidates = self.feasible_candidates(batch)
        if not candidates:
            logger.debug("No single carton fits %d items", len(batch))
            return NO_FIT

        best = candidates[0]
        for c in candidates[1:]:
            if c.score.total > best.score.total:
                best = c

        logger.debug(
            "Selected %s for %d items (score %.2f, fill %.2f)",
            best.carton_type.name,
            best.item_count,
            best.score.total,
            best.score.fill_rate,
        )
        return best

    def split_into_multiple_cartons(self, items: Sequence[PackItem]) -> SplitResult:
        """
        Best-effort packing of `items` into a sequence of cartons.

        Each round starts from all remaining items and drops the largest item
        (first one on ties) until a single carton fits the batch. Rounds are
        bounded by config.max_attempts. A round that empties its batch ends
        the whole run; whatever is left is reported in `unpacked`.
        """
        remaining = require_items(items)
        total = len(remaining)
        cartons: List[Carton] = []
        attempts = 0

        while remaining and attempts < self.config.max_attempts:
            attempts += 1
            # positions into `remaining`; the same object may appear more than once
            batch = list(range(len(remaining)))
            carton = self.select_optimal_carton(remaining)

            while not carton and batch:
                largest = max(batch, key=lambda i: remaining[i].volume)
                batch.remove(largest)
                if batch:
                    carton = self.select_optimal_carton([remaining[i] for i in batch])

            if not carton:
                break

            cartons.append(carton)
            packed = set(batch)
            remaining = [it for i, it in enumerate(remaining) if i not in packed]
            logger.debug(
                "Round %d: %s took %d items, %d left",
                attempts,
                carton.carton_type.name,
                carton.item_count,
                len(remaining),
            )

        if remaining:
            logger.info(
                "Split packed %d of %d items into %d cartons; %d unpacked",
                total - len(remaining),
                total,
                len(cartons),
                len(remaining),
            )

        return SplitResult(
            cartons=tuple(cartons), unpacked=tuple(remaining), attempts=attempts
        )

    def suggest_alternatives(
        self, items: Sequence[PackItem], limit: Optional[int] = None
    ) -> List[Suggestion]:
        """
        Feasible cartons ranked by total score (highest first) with advisory text.
        """
        limit = self.config.max_suggestions if limit is None else limit
        if limit < 0:
            raise InvalidInputError(f"limit must not be negative, got {limit}")
        ranked = sorted(
            self.feasible_candidates(items), key=lambda c: c.score.total, reverse=True
        )
        return [
            Suggestion(
                carton_type=c.carton_type,
                score=c.score,
                recommendation=recommendation_for(c.score),
            )
            for c in ranked[:limit]
        ]

    # ----------------------------
    # Quick checks (no placement simulation)
    # ----------------------------

    def can_item_fit(self, item: PackItem, carton_type: CartonType) -> bool:
        """
        True if a single item fits an empty carton in some orientation and
        within its max weight.
        """
        if item is None or carton_type is None:
            return False
        if item.weight > carton_type.max_weight:
            return False
        return any(fits_in_carton(o, carton_type) for o in orientations_of(item))

    def should_split(self, items: Sequence[PackItem]) -> bool:
        """
        True if the batch is heavier or bulkier than the biggest catalog carton.
        """
        metrics = aggregate_metrics(items)
        heaviest = max(ct.max_weight for ct in self.catalog)
        largest = max(ct.volume for ct in self.catalog)
        if metrics.total_weight > heaviest:
            logger.info(
                "Items should be split: total weight %.2f exceeds max %.2f",
                metrics.total_weight,
                heaviest,
            )
            return True
        if metrics.total_volume > largest:
            logger.info(
                "Items should be split: total volume %.1f exceeds max %.1f",
                metrics.total_volume,
                largest,
            )
            return True
        return False

    def estimate_carton_count(self, items: Sequence[PackItem]) -> int:
        """
        Lower bound on cartons needed, from weight and volume alone.
        """
        metrics = aggregate_metrics(items)
        heaviest = max(ct.max_weight for ct in self.catalog)
        largest = max(ct.volume for ct in self.catalog)
        return max(
            1,
            ceil(metrics.total_weight / heaviest),
            ceil(metrics.total_volume / largest),
        )


def summarize_split(result: SplitResult, elapsed_ms: float = 0.0) -> Dict[str, Any]:
    """
    Optimization summary for a split run (counts, volume, utilization, timing).
    """
    item_volume = sum(c.used_volume() for c in result.cartons)
    capacity = sum(c.carton_type.volume for c in result.cartons)
    return {
        "items_count": result.packed_count + len(result.unpacked),
        "packed_count": result.packed_count,
        "unpacked_count": len(result.unpacked),
        "cartons_required": len(result.cartons),
        "carton_types": [c.carton_type.name for c in result.cartons],
        "total_item_volume": item_volume,
        "space_utilization_percentage": (
            item_volume / capacity * 100.0 if capacity > 0 else 0.0
        ),
        "total_carton_cost": sum(c.carton_type.cost for c in result.cartons),
        "attempts": result.attempts,
        "algorithm_used": ALGORITHM_NAME,
        "optimization_time_ms": round(elapsed_ms, 3),
    }


__all__ = ["ALGORITHM_NAME", "CartonSelector", "summarize_split"]
