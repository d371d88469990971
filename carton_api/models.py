# carton_api/models.py
"""
Core datamodels for carton_api.

This module provides:
- Dataclass-based core models used by the selection engine (immutable records).
- Pydantic models used for API input/output (serialization & validation).
- Small conversion helpers between dataclasses and pydantic models.

Keep dataclasses free of framework-specific dependencies so they can be used
directly by the packing algorithm. Pydantic models are thin wrappers for
validation/IO when exposing the functionality through FastAPI.

All dimensions and weights are expected in consistent units (the default
catalog uses inches and pounds).
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

Dims = Tuple[float, float, float]


class InvalidInputError(ValueError):
    """Raised for malformed input: empty item lists, None entries, bad numbers."""


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


# ----------------------------
# Dataclass core models
# ----------------------------


@dataclass(frozen=True)
class PackItem:
    """
    One physical item to be packed.

    Attributes:
    - product_id: identity of the item (SKU or unit id)
    - length, width, height: bounding dimensions, each > 0
    - weight: item weight, >= 0
    - fragile: item needs rigid protection
    - requires_padding: item needs dunnage inside the carton
    """

    product_id: str
    length: float
    width: float
    height: float
    weight: float = 0.0
    fragile: bool = False
    requires_padding: bool = False

    def __post_init__(self) -> None:
        if not _finite(self.length, self.width, self.height, self.weight):
            raise InvalidInputError(
                f"item {self.product_id!r}: dimensions and weight must be finite"
            )
        if self.length <= 0 or self.width <= 0 or self.height <= 0:
            raise InvalidInputError(
                f"item {self.product_id!r}: all dimensions must be positive"
            )
        if self.weight < 0:
            raise InvalidInputError(
                f"item {self.product_id!r}: weight must not be negative"
            )

    @property
    def dimensions(self) -> Dims:
        return (self.length, self.width, self.height)

    @property
    def volume(self) -> float:
        """Geometric volume (length * width * height)."""
        return self.length * self.width * self.height


@dataclass(frozen=True)
class CartonType:
    """
    Static catalog entry describing a carton size class.

    Attributes:
    - name: catalog key, e.g. "SMALL_BOX" (also used to detect envelope-class cartons)
    - length, width, height: usable interior dimensions
    - max_weight: maximum payload weight
    - tare_weight: weight of the empty carton
    - cost: material cost of one carton
    - display_name: optional human readable name
    """

    name: str
    length: float
    width: float
    height: float
    max_weight: float
    tare_weight: float = 0.0
    cost: float = 0.0
    display_name: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidInputError("carton type needs a name")
        if not _finite(
            self.length,
            self.width,
            self.height,
            self.max_weight,
            self.tare_weight,
            self.cost,
        ):
            raise InvalidInputError(f"carton {self.name!r}: numbers must be finite")
        if self.length <= 0 or self.width <= 0 or self.height <= 0:
            raise InvalidInputError(
                f"carton {self.name!r}: all dimensions must be positive"
            )
        if self.max_weight <= 0:
            raise InvalidInputError(f"carton {self.name!r}: max_weight must be > 0")
        if self.tare_weight < 0 or self.cost < 0:
            raise InvalidInputError(
                f"carton {self.name!r}: tare_weight and cost must not be negative"
            )

    @property
    def label(self) -> str:
        return self.display_name or self.name

    @property
    def dimensions(self) -> Dims:
        return (self.length, self.width, self.height)

    @property
    def volume(self) -> float:
        """Interior volume."""
        return self.length * self.width * self.height


@dataclass(frozen=True)
class Space:
    """
    Axis-aligned free box inside a carton: min corner (x, y, z) plus extents.
    """

    x: float
    y: float
    z: float
    length: float
    width: float
    height: float

    @property
    def origin(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def fits(self, dims: Dims) -> bool:
        l, w, h = dims
        return l <= self.length and w <= self.width and h <= self.height


@dataclass(frozen=True)
class PlacedItem:
    """
    Item placed inside a carton.

    - item: the PackItem as given
    - orientation: (l, w, h) tuple after rotation (axis-aligned)
    - position: (x, y, z) coordinates of the item's minimum corner
    """

    item: PackItem
    orientation: Dims
    position: Tuple[float, float, float]

    @property
    def product_id(self) -> str:
        return self.item.product_id

    @property
    def weight(self) -> float:
        return self.item.weight

    @property
    def volume(self) -> float:
        l, w, h = self.orientation
        return l * w * h

    @property
    def max_corner(self) -> Tuple[float, float, float]:
        x, y, z = self.position
        l, w, h = self.orientation
        return (x + l, y + w, z + h)


@dataclass(frozen=True)
class PackingResult:
    """
    Outcome of one placement simulation.

    On success `placements` holds every item in placement order. On failure
    `failed_item` names the item that could not be placed and `reason` says
    which constraint failed ("unplaceable" or "overweight").
    """

    success: bool
    placements: Tuple[PlacedItem, ...] = ()
    failed_item: Optional[PackItem] = None
    reason: str = ""

    @classmethod
    def ok(cls, placements: List[PlacedItem]) -> "PackingResult":
        return cls(success=True, placements=tuple(placements))

    @classmethod
    def failure(cls, item: PackItem, reason: str) -> "PackingResult":
        return cls(success=False, failed_item=item, reason=reason)


@dataclass(frozen=True)
class ItemMetrics:
    total_volume: float
    total_weight: float
    max_length: float
    max_width: float
    total_height: float
    has_fragile: bool
    requires_padding: bool
    item_count: int


@dataclass(frozen=True)
class CartonScore:
    """
    Component scores for one feasible carton, plus the combined total.
    """

    utilization: float
    weight_efficiency: float
    cost: float
    protection: float
    total: float
    fill_rate: float
    chargeable_weight: float
    dimensional_weight: float


@dataclass(frozen=True)
class Carton:
    """
    Chosen carton: a CartonType plus the items placed inside it.

    Instances come out of CartonBuilder.build(); they are never empty.
    """

    carton_type: CartonType
    placements: Tuple[PlacedItem, ...]
    score: Optional[CartonScore] = None

    @property
    def items(self) -> List[PackItem]:
        return [p.item for p in self.placements]

    @property
    def item_count(self) -> int:
        return len(self.placements)

    @property
    def items_weight(self) -> float:
        return sum(p.weight for p in self.placements)

    @property
    def gross_weight(self) -> float:
        """Payload plus the empty carton."""
        return self.items_weight + self.carton_type.tare_weight

    @property
    def dimensions(self) -> Dims:
        return self.carton_type.dimensions

    def used_volume(self) -> float:
        """Sum of volumes of placed items."""
        return sum(p.volume for p in self.placements)

    @property
    def fill_rate(self) -> float:
        cap = self.carton_type.volume
        return self.used_volume() / cap if cap > 0 else 0.0

    @property
    def weight_utilization(self) -> float:
        """Payload as a percentage of the carton's max weight."""
        return self.items_weight / self.carton_type.max_weight * 100.0


@dataclass
class CartonBuilder:
    """
    Accumulates placements for one carton, then freezes them into a Carton.
    """

    carton_type: CartonType
    placements: List[PlacedItem] = field(default_factory=list)

    @property
    def weight(self) -> float:
        return sum(p.weight for p in self.placements)

    def can_hold(self, additional_weight: float) -> bool:
        return self.weight + additional_weight <= self.carton_type.max_weight

    def add(self, placed: PlacedItem) -> "CartonBuilder":
        if not self.can_hold(placed.weight):
            raise ValueError(
                f"{placed.product_id!r} would exceed max weight of {self.carton_type.name}"
            )
        self.placements.append(placed)
        return self

    def extend(self, placements) -> "CartonBuilder":
        for placed in placements:
            self.add(placed)
        return self

    def build(self, score: Optional[CartonScore] = None) -> Carton:
        if not self.placements:
            raise ValueError("a carton cannot be created without items")
        return Carton(
            carton_type=self.carton_type,
            placements=tuple(self.placements),
            score=score,
        )


class NoFit:
    """
    Sentinel type returned when no single carton in the catalog can hold a batch.

    Falsy, so callers can write `if not carton: ...`.
    """

    _instance: Optional["NoFit"] = None

    def __new__(cls) -> "NoFit":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_FIT"


NO_FIT = NoFit()


@dataclass(frozen=True)
class SplitResult:
    """
    Best-effort multi-carton outcome.

    - cartons: cartons built, in order
    - unpacked: items that no carton could take
    - attempts: outer-loop iterations used
    """

    cartons: Tuple[Carton, ...]
    unpacked: Tuple[PackItem, ...]
    attempts: int

    @property
    def packed_count(self) -> int:
        return sum(c.item_count for c in self.cartons)

    @property
    def complete(self) -> bool:
        return not self.unpacked


@dataclass(frozen=True)
class Suggestion:
    carton_type: CartonType
    score: CartonScore
    recommendation: str


# ----------------------------
# Pydantic models for API surface
# ----------------------------

# Input models (Create / Request)


class PackItemCreate(BaseModel):
    product_id: str = Field(..., description="Product / unit identifier")
    length: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    weight: float = Field(0.0, ge=0)
    fragile: bool = Field(False)
    requires_padding: bool = Field(False)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "product_id": "SKU-123",
                "length": 6.0,
                "width": 4.0,
                "height": 2.0,
                "weight": 0.5,
                "fragile": False,
                "requires_padding": False,
            }
        }
    )


class CartonTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Catalog key, e.g. SMALL_BOX")
    length: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    max_weight: float = Field(..., gt=0)
    tare_weight: float = Field(0.0, ge=0)
    cost: float = Field(0.0, ge=0)
    display_name: Optional[str] = Field(None)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "SMALL_BOX",
                "length": 8.0,
                "width": 6.0,
                "height": 4.0,
                "max_weight": 20.0,
                "tare_weight": 0.3,
                "cost": 0.75,
                "display_name": "Small Box",
            }
        }
    )


class SelectionRequest(BaseModel):
    items: List[PackItemCreate]
    catalog: Optional[List[CartonTypeCreate]] = Field(
        None, description="Carton catalog override; the service catalog is used if omitted"
    )


class SuggestionRequest(SelectionRequest):
    limit: int = Field(5, ge=1, le=20)


# Output models (Read / Response)


class PlacedItemRead(BaseModel):
    product_id: str
    length: float
    width: float
    height: float
    weight: float
    fragile: bool
    orientation: Tuple[float, float, float]
    position: Tuple[float, float, float]

    model_config = ConfigDict(from_attributes=True)


class CartonScoreRead(BaseModel):
    utilization: float
    weight_efficiency: float
    cost: float
    protection: float
    total: float
    fill_rate: float
    chargeable_weight: float
    dimensional_weight: float

    model_config = ConfigDict(from_attributes=True)


class CartonRead(BaseModel):
    carton_type: str
    display_name: Optional[str]
    length: float
    width: float
    height: float
    max_weight: float
    tare_weight: float
    cost: float
    items: List[PlacedItemRead]
    item_count: int
    items_weight: float
    gross_weight: float
    used_volume: float
    capacity_volume: float
    fill_rate: float
    weight_utilization: float
    score: Optional[CartonScoreRead] = None


class SelectionResponse(BaseModel):
    fits: bool
    carton: Optional[CartonRead] = None


class SplitResponse(BaseModel):
    cartons: List[CartonRead]
    unpacked_items: List[PackItemCreate]
    complete: bool
    summary: Optional[Dict[str, Any]] = None


class SuggestionRead(BaseModel):
    carton_type: CartonTypeCreate
    score: CartonScoreRead
    recommendation: str


# ----------------------------
# Conversion helpers
# ----------------------------


def packitemcreate_to_dataclass(ic: PackItemCreate) -> PackItem:
    """Convert PackItemCreate (pydantic) to PackItem dataclass."""
    return PackItem(
        product_id=ic.product_id,
        length=ic.length,
        width=ic.width,
        height=ic.height,
        weight=ic.weight,
        fragile=ic.fragile,
        requires_padding=ic.requires_padding,
    )


def packitem_to_create(item: PackItem) -> PackItemCreate:
    """Convert PackItem dataclass back to its wire model (used for unpacked items)."""
    return PackItemCreate(
        product_id=item.product_id,
        length=item.length,
        width=item.width,
        height=item.height,
        weight=item.weight,
        fragile=item.fragile,
        requires_padding=item.requires_padding,
    )


def cartontypecreate_to_dataclass(cc: CartonTypeCreate) -> CartonType:
    """Convert CartonTypeCreate (pydantic) to CartonType dataclass."""
    return CartonType(
        name=cc.name,
        length=cc.length,
        width=cc.width,
        height=cc.height,
        max_weight=cc.max_weight,
        tare_weight=cc.tare_weight,
        cost=cc.cost,
        display_name=cc.display_name,
    )


def cartontype_to_create(ct: CartonType) -> CartonTypeCreate:
    return CartonTypeCreate(
        name=ct.name,
        length=ct.length,
        width=ct.width,
        height=ct.height,
        max_weight=ct.max_weight,
        tare_weight=ct.tare_weight,
        cost=ct.cost,
        display_name=ct.display_name,
    )


def placeditem_from_dataclass(pi: PlacedItem) -> PlacedItemRead:
    """Convert dataclass PlacedItem to Pydantic PlacedItemRead."""
    return PlacedItemRead(
        product_id=pi.product_id,
        length=pi.item.length,
        width=pi.item.width,
        height=pi.item.height,
        weight=pi.weight,
        fragile=pi.item.fragile,
        orientation=pi.orientation,
        position=pi.position,
    )


def score_from_dataclass(score: CartonScore) -> CartonScoreRead:
    return CartonScoreRead(**asdict(score))


def carton_from_dataclass(carton: Carton) -> CartonRead:
    """Convert dataclass Carton to Pydantic CartonRead."""
    ct = carton.carton_type
    return CartonRead(
        carton_type=ct.name,
        display_name=ct.display_name,
        length=ct.length,
        width=ct.width,
        height=ct.height,
        max_weight=ct.max_weight,
        tare_weight=ct.tare_weight,
        cost=ct.cost,
        items=[placeditem_from_dataclass(p) for p in carton.placements],
        item_count=carton.item_count,
        items_weight=carton.items_weight,
        gross_weight=carton.gross_weight,
        used_volume=carton.used_volume(),
        capacity_volume=ct.volume,
        fill_rate=carton.fill_rate,
        weight_utilization=carton.weight_utilization,
        score=score_from_dataclass(carton.score) if carton.score else None,
    )


def suggestion_from_dataclass(s: Suggestion) -> SuggestionRead:
    return SuggestionRead(
        carton_type=cartontype_to_create(s.carton_type),
        score=score_from_dataclass(s.score),
        recommendation=s.recommendation,
    )


# Expose minimal public API from this module
__all__ = [
    "InvalidInputError",
    "PackItem",
    "CartonType",
    "Space",
    "PlacedItem",
    "PackingResult",
    "ItemMetrics",
    "CartonScore",
    "Carton",
    "CartonBuilder",
    "NoFit",
    "NO_FIT",
    "SplitResult",
    "Suggestion",
    "PackItemCreate",
    "CartonTypeCreate",
    "SelectionRequest",
    "SuggestionRequest",
    "PlacedItemRead",
    "CartonScoreRead",
    "CartonRead",
    "SelectionResponse",
    "SplitResponse",
    "SuggestionRead",
    "packitemcreate_to_dataclass",
    "packitem_to_create",
    "cartontypecreate_to_dataclass",
    "cartontype_to_create",
    "carton_from_dataclass",
    "suggestion_from_dataclass",
]
