# carton_api/packing.py
"""
Core packing logic: metrics, admission filter and the placement simulation.

This module provides the geometry-only building blocks used by the selector:
- orientations_of, fits_in_carton, aabb_overlap, placements_overlap
- aggregate_metrics: batch totals used by every later stage
- passes_admission: cheap weight / volume check run before placement
- place_items: first-fit guillotine placement of a batch into one carton
- summary printing helpers

The placement engine is a fast heuristic, not an optimal packer: items go in
largest first, each into the first free space (oldest first) and the first
orientation that fits. There is no backtracking.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import (
    CartonBuilder,
    CartonType,
    Dims,
    InvalidInputError,
    ItemMetrics,
    PackingResult,
    PackItem,
    PlacedItem,
    Space,
)

UNPLACEABLE = "unplaceable"
OVERWEIGHT = "overweight"

# ----------------------------
# Geometry helpers
# ----------------------------


def orientations_of(item: PackItem) -> List[Dims]:
    """
    Return the 6 axis-aligned orientations of an item, in fixed order:
    (l,w,h), (l,h,w), (w,l,h), (w,h,l), (h,l,w), (h,w,l).

    Duplicates (cubes, square faces) are kept so the order never shifts.
    """
    l, w, h = item.dimensions
    return [(l, w, h), (l, h, w), (w, l, h), (w, h, l), (h, l, w), (h, w, l)]


def fits_in_carton(rot_dims: Dims, carton: CartonType) -> bool:
    """
    Check if rotated dimensions fit in the carton interior.
    """
    l, w, h = rot_dims
    return (l <= carton.length) and (w <= carton.width) and (h <= carton.height)


def aabb_overlap(a_min, a_max, b_min, b_max) -> bool:
    """
    Axis-aligned bounding box overlap test in 3D.
    Returns True if boxes overlap (touching faces do not count).
    """
    for i in range(3):
        if a_max[i] <= b_min[i] or b_max[i] <= a_min[i]:
            return False
    return True


def placements_overlap(placements: Sequence[PlacedItem]) -> bool:
    """
    Return True if any two placements share interior volume.
    """
    for i, a in enumerate(placements):
        for b in placements[i + 1 :]:
            if aabb_overlap(a.position, a.max_corner, b.position, b.max_corner):
                return True
    return False


def split_space(space: Space, dims: Dims) -> List[Space]:
    """
    Guillotine split of `space` after placing a box of `dims` at its origin.

    Children, each kept only if its residual extent is positive:
    - right: beyond the item along length, full width and height
    - above: beyond the item along width, over the item's length, full height
    - front: beyond the item along height, over the item's footprint
    The three children are disjoint and never intersect the placed item.
    """
    l, w, h = dims
    children: List[Space] = []
    if space.length - l > 0:
        children.append(
            Space(
                space.x + l,
                space.y,
                space.z,
                space.length - l,
                space.width,
                space.height,
            )
        )
    if space.width - w > 0:
        children.append(
            Space(space.x, space.y + w, space.z, l, space.width - w, space.height)
        )
    if space.height - h > 0:
        children.append(Space(space.x, space.y, space.z + h, l, w, space.height - h))
    return children


# ----------------------------
# Item metrics
# ----------------------------


def require_items(items) -> List[PackItem]:
    if items is None:
        raise InvalidInputError("items must not be None")
    items = list(items)
    if not items:
        raise InvalidInputError("items must be a non-empty list")
    if any(it is None for it in items):
        raise InvalidInputError("items must not contain None entries")
    return items


def aggregate_metrics(items: Iterable[PackItem]) -> ItemMetrics:
    """
    Reduce a batch of items into the totals used by filtering and scoring.

    Lengths and widths are maxed, heights are summed (a simple vertical
    stacking estimate, not a bounding box).
    """
    batch = require_items(items)
    return ItemMetrics(
        total_volume=sum(it.volume for it in batch),
        total_weight=sum(it.weight for it in batch),
        max_length=max(it.length for it in batch),
        max_width=max(it.width for it in batch),
        total_height=sum(it.height for it in batch),
        has_fragile=any(it.fragile for it in batch),
        requires_padding=any(it.requires_padding for it in batch),
        item_count=len(batch),
    )


# ----------------------------
# Candidate filter
# ----------------------------


def passes_admission(
    metrics: ItemMetrics, carton: CartonType, volume_margin: float = 0.80
) -> bool:
    """
    Necessary (not sufficient) check before running the placement simulation:
    payload within max weight, and items filling at most `volume_margin`
    of the carton.
    """
    if metrics.total_weight > carton.max_weight:
        return False
    if carton.volume < metrics.total_volume / volume_margin:
        return False
    return True


# ----------------------------
# Placement engine
# ----------------------------


def _first_fit(
    item: PackItem, spaces: List[Space]
) -> Optional[Tuple[int, Dims]]:
    for idx, space in enumerate(spaces):
        for dims in orientations_of(item):
            if space.fits(dims):
                return idx, dims
    return None


def place_items(items: Sequence[PackItem], carton: CartonType) -> PackingResult:
    """
    Simulate packing `items` into one empty `carton`.

    1) Sort items by volume, largest first (stable).
    2) Start with one free space spanning the whole interior.
    3) For each item take the first space (list order) and the first
       orientation that fits; place it at the space origin, drop the space
       and append its guillotine children.
    4) The first item that fits nowhere ends the run with a failure naming it.
    """
    ordered = sorted(items, key=lambda it: it.volume, reverse=True)
    spaces: List[Space] = [Space(0.0, 0.0, 0.0, *carton.dimensions)]
    builder = CartonBuilder(carton)

    for item in ordered:
        if not builder.can_hold(item.weight):
            return PackingResult.failure(item, OVERWEIGHT)

        found = _first_fit(item, spaces)
        if found is None:
            return PackingResult.failure(item, UNPLACEABLE)

        idx, dims = found
        space = spaces.pop(idx)
        builder.add(PlacedItem(item=item, orientation=dims, position=space.origin))
        spaces.extend(split_space(space, dims))

    return PackingResult.ok(builder.placements)


# ----------------------------
# Summary printing helpers
# ----------------------------


def print_selection_summary(cartons, unpacked_items: Sequence[PackItem]) -> None:
    """
    Print a human-friendly summary of chosen cartons to stdout.
    """
    for n, c in enumerate(cartons, start=1):
        ct = c.carton_type
        counter = Counter(p.product_id for p in c.placements)
        print(f"Carton {n}: {ct.label}")
        print(f" Size: {ct.length}x{ct.width}x{ct.height}")
        print(f" Volume utilization: {c.fill_rate * 100:.1f}%")
        print(f" Weight: {c.items_weight:.2f} of {ct.max_weight:.2f}")
        if c.score is not None:
            print(f" Score: {c.score.total:.1f}")
        print(" Items:")
        for product_id, qty in counter.items():
            print(f" - {product_id}: {qty}")
        print()

    if unpacked_items:
        counter_un = Counter(it.product_id for it in unpacked_items)
        print("Items that could NOT be packed:")
        for product_id, qty in counter_un.items():
            print(f" - {product_id}: {qty}")
    else:
        print("All items were successfully packed.")


__all__ = [
    "UNPLACEABLE",
    "OVERWEIGHT",
    "orientations_of",
    "fits_in_carton",
    "aabb_overlap",
    "placements_overlap",
    "split_space",
    "require_items",
    "aggregate_metrics",
    "passes_admission",
    "place_items",
    "print_selection_summary",
]
