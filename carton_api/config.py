"""
Engine configuration: the carton catalog plus the scoring / filtering constants.

The catalog is configuration data, not runtime state: an EngineConfig is frozen
and holds the catalog as a tuple, so one instance can be shared by any number
of concurrent selections.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from .models import (
    CartonType,
    CartonTypeCreate,
    InvalidInputError,
    cartontypecreate_to_dataclass,
)

logger = logging.getLogger(__name__)

CATALOG_ENV_VAR = "CARTON_API_CATALOG"

# Standard catalog, inches / pounds / dollars
DEFAULT_CATALOG: Tuple[CartonType, ...] = (
    CartonType("SMALL_BOX", 8, 6, 4, 20.0, 0.3, 0.75, "Small Box"),
    CartonType("MEDIUM_BOX", 12, 10, 8, 40.0, 0.6, 1.25, "Medium Box"),
    CartonType("LARGE_BOX", 18, 14, 12, 50.0, 1.0, 2.0, "Large Box"),
    CartonType("EXTRA_LARGE_BOX", 24, 18, 18, 70.0, 1.5, 3.0, "Extra Large Box"),
)


@dataclass(frozen=True)
class ScoreWeights:
    utilization: float = 0.40
    weight_efficiency: float = 0.30
    cost: float = 0.20
    protection: float = 0.10


@dataclass(frozen=True)
class EngineConfig:
    """
    Settings for one CartonSelector.

    - catalog: ordered carton types; order decides score ties
    - optimal_fill_rate: fill rate that earns a full utilization score
    - volume_margin: items may occupy at most this share of a carton's volume
      for the carton to be tried at all
    - dim_divisor: dimensional-weight divisor (166 for domestic inches/pounds)
    - cost_ceiling: carton cost that scores 0 on the cost component
    - max_attempts: outer-loop bound of the multi-carton splitter
    - max_suggestions: default length of the alternatives list
    - envelope_keywords: name fragments marking cartons without rigid sides
    """

    catalog: Tuple[CartonType, ...] = DEFAULT_CATALOG
    optimal_fill_rate: float = 0.75
    volume_margin: float = 0.80
    dim_divisor: float = 166.0
    cost_ceiling: float = 10.0
    weights: ScoreWeights = field(default_factory=ScoreWeights)
    max_attempts: int = 10
    max_suggestions: int = 5
    envelope_keywords: Tuple[str, ...] = ("ENVELOPE", "MAILER")

    def __post_init__(self) -> None:
        if self.catalog is None:
            raise InvalidInputError("catalog must not be None")
        # accept any iterable, keep a tuple
        object.__setattr__(self, "catalog", tuple(self.catalog))
        if not self.catalog:
            raise InvalidInputError("catalog must contain at least one carton type")
        if any(ct is None for ct in self.catalog):
            raise InvalidInputError("catalog must not contain None entries")
        if not 0 < self.volume_margin <= 1:
            raise InvalidInputError("volume_margin must be in (0, 1]")
        if self.optimal_fill_rate <= 0 or self.dim_divisor <= 0:
            raise InvalidInputError("optimal_fill_rate and dim_divisor must be > 0")
        if self.max_attempts < 1:
            raise InvalidInputError("max_attempts must be >= 1")

    def with_catalog(self, catalog: Iterable[CartonType]) -> "EngineConfig":
        """Copy of this config with another catalog."""
        return EngineConfig(
            catalog=tuple(catalog),
            optimal_fill_rate=self.optimal_fill_rate,
            volume_margin=self.volume_margin,
            dim_divisor=self.dim_divisor,
            cost_ceiling=self.cost_ceiling,
            weights=self.weights,
            max_attempts=self.max_attempts,
            max_suggestions=self.max_suggestions,
            envelope_keywords=self.envelope_keywords,
        )


_catalog_adapter = TypeAdapter(List[CartonTypeCreate])


def parse_catalog(data) -> Tuple[CartonType, ...]:
    """
    Validate raw catalog data (list of dicts) and convert it to CartonTypes.
    """
    try:
        entries = _catalog_adapter.validate_python(data)
    except ValidationError as exc:
        raise InvalidInputError(f"invalid carton catalog: {exc}") from exc
    return tuple(cartontypecreate_to_dataclass(e) for e in entries)


def load_catalog(path: str) -> Tuple[CartonType, ...]:
    """
    Read a JSON file holding a list of carton definitions.
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    catalog = parse_catalog(data)
    logger.info("Loaded %d carton types from %s", len(catalog), path)
    return catalog


def config_from_env(environ: Optional[dict] = None) -> EngineConfig:
    """
    Build an EngineConfig, reading the catalog from $CARTON_API_CATALOG if set.
    """
    env = os.environ if environ is None else environ
    path = env.get(CATALOG_ENV_VAR)
    if not path:
        return EngineConfig()
    return EngineConfig(catalog=load_catalog(path))


__all__ = [
    "CATALOG_ENV_VAR",
    "DEFAULT_CATALOG",
    "ScoreWeights",
    "EngineConfig",
    "parse_catalog",
    "load_catalog",
    "config_from_env",
]
