"""
Tests for the carton_api packing core: metrics, admission filter and the
placement simulation.

Run with: pytest -q
"""

import random

import pytest

from carton_api import models as m
from carton_api import packing as packing_core
from carton_api.config import DEFAULT_CATALOG


def small_box():
    return DEFAULT_CATALOG[0]


def three_mugs():
    """
    Three identical 6x4x2 items, 0.5 lb each (144 cu in, 1.5 lb in total).
    """
    return [m.PackItem(f"MUG-{i}", 6.0, 4.0, 2.0, weight=0.5) for i in range(3)]


# ----------------------------
# Item metrics
# ----------------------------


def test_aggregate_metrics_totals_and_flags():
    items = [
        m.PackItem("A", 6.0, 4.0, 2.0, weight=0.5),
        m.PackItem("B", 10.0, 3.0, 1.0, weight=1.0, fragile=True),
        m.PackItem("C", 2.0, 8.0, 5.0, weight=0.25, requires_padding=True),
    ]

    metrics = packing_core.aggregate_metrics(items)

    assert metrics.total_volume == pytest.approx(158.0)
    assert metrics.total_weight == pytest.approx(1.75)
    assert metrics.max_length == 10.0
    assert metrics.max_width == 8.0
    # heights are stacked, not maxed
    assert metrics.total_height == pytest.approx(8.0)
    assert metrics.has_fragile is True
    assert metrics.requires_padding is True
    assert metrics.item_count == 3


@pytest.mark.parametrize("bad", [None, [], [None]])
def test_aggregate_metrics_rejects_missing_items(bad):
    with pytest.raises(m.InvalidInputError):
        packing_core.aggregate_metrics(bad)


@pytest.mark.parametrize(
    "dims, weight",
    [
        ((0.0, 1.0, 1.0), 1.0),
        ((1.0, -2.0, 1.0), 1.0),
        ((1.0, 1.0, 1.0), -0.1),
        ((float("nan"), 1.0, 1.0), 1.0),
        ((1.0, 1.0, float("inf")), 1.0),
        ((1.0, 1.0, 1.0), float("nan")),
    ],
)
def test_pack_item_validation(dims, weight):
    with pytest.raises(m.InvalidInputError):
        m.PackItem("BAD", *dims, weight=weight)


def test_carton_type_validation():
    with pytest.raises(m.InvalidInputError):
        m.CartonType("BROKEN", 10, 10, 0, 20.0)
    with pytest.raises(m.InvalidInputError):
        m.CartonType("", 10, 10, 10, 20.0)
    with pytest.raises(m.InvalidInputError):
        m.CartonType("NAN_BOX", float("nan"), 10, 10, 20.0)
    with pytest.raises(m.InvalidInputError):
        m.CartonType("NAN_LIMIT", 10, 10, 10, float("nan"))


# ----------------------------
# Geometry helpers
# ----------------------------


def test_orientations_fixed_order():
    item = m.PackItem("X", 1.0, 2.0, 3.0)
    assert packing_core.orientations_of(item) == [
        (1.0, 2.0, 3.0),
        (1.0, 3.0, 2.0),
        (2.0, 1.0, 3.0),
        (2.0, 3.0, 1.0),
        (3.0, 1.0, 2.0),
        (3.0, 2.0, 1.0),
    ]


def test_orientations_keep_duplicates_for_cubes():
    cube = m.PackItem("CUBE", 2.0, 2.0, 2.0)
    assert len(packing_core.orientations_of(cube)) == 6


def test_split_space_children():
    space = m.Space(0.0, 0.0, 0.0, 8.0, 6.0, 4.0)

    children = packing_core.split_space(space, (6.0, 4.0, 2.0))

    assert children == [
        m.Space(6.0, 0.0, 0.0, 2.0, 6.0, 4.0),
        m.Space(0.0, 4.0, 0.0, 6.0, 2.0, 4.0),
        m.Space(0.0, 0.0, 2.0, 6.0, 4.0, 2.0),
    ]


def test_split_space_exact_fit_leaves_nothing():
    space = m.Space(1.0, 2.0, 3.0, 4.0, 4.0, 4.0)
    assert packing_core.split_space(space, (4.0, 4.0, 4.0)) == []


# ----------------------------
# Candidate filter
# ----------------------------


def test_passes_admission_volume_margin_and_weight():
    metrics = packing_core.aggregate_metrics(three_mugs())

    assert packing_core.passes_admission(metrics, small_box())
    # 168 cu in < 144 / 0.8
    tight = m.CartonType("TIGHT", 8, 6, 3.5, 20.0)
    assert not packing_core.passes_admission(metrics, tight)
    light = m.CartonType("LIGHT", 8, 6, 4, 1.0)
    assert not packing_core.passes_admission(metrics, light)


# ----------------------------
# Placement engine
# ----------------------------


def test_place_items_first_fit_positions():
    result = packing_core.place_items(three_mugs(), small_box())

    assert result.success
    assert [p.position for p in result.placements] == [
        (0.0, 0.0, 0.0),
        (6.0, 0.0, 0.0),
        (0.0, 4.0, 0.0),
    ]
    assert [p.orientation for p in result.placements] == [
        (6.0, 4.0, 2.0),
        (2.0, 6.0, 4.0),
        (6.0, 2.0, 4.0),
    ]
    assert not packing_core.placements_overlap(result.placements)


def test_place_items_largest_first():
    tiny = m.PackItem("TINY", 1.0, 1.0, 1.0)
    big = m.PackItem("BIG", 5.0, 5.0, 5.0)
    carton = m.CartonType("CUBE", 5, 5, 6, 10.0)

    result = packing_core.place_items([tiny, big], carton)

    assert result.success
    assert result.placements[0].item is big
    assert result.placements[0].position == (0.0, 0.0, 0.0)
    assert result.placements[1].position == (0.0, 0.0, 5.0)


def test_place_items_names_unplaceable_item():
    first = m.PackItem("SLAB-1", 10.0, 10.0, 6.0)
    second = m.PackItem("SLAB-2", 10.0, 10.0, 6.0)
    carton = m.CartonType("CUBE", 10, 10, 10, 50.0)

    result = packing_core.place_items([first, second], carton)

    assert not result.success
    assert result.failed_item is second
    assert result.reason == packing_core.UNPLACEABLE
    assert result.placements == ()


def test_place_items_stops_on_overweight():
    items = [m.PackItem("A", 1.0, 1.0, 1.0, weight=0.6), m.PackItem("B", 1.0, 1.0, 1.0, weight=0.6)]
    carton = m.CartonType("FEATHER", 10, 10, 10, 1.0)

    result = packing_core.place_items(items, carton)

    assert not result.success
    assert result.reason == packing_core.OVERWEIGHT


def test_placements_never_overlap_or_exceed_limits():
    carton = DEFAULT_CATALOG[-1]
    rng = random.Random(1234)
    successes = 0

    for _ in range(40):
        items = [
            m.PackItem(
                f"R-{i}",
                rng.choice([2.0, 3.5, 4.0, 6.0, 9.0]),
                rng.choice([1.0, 2.0, 5.0, 7.5]),
                rng.choice([1.5, 3.0, 4.0, 8.0]),
                weight=rng.uniform(0.1, 4.0),
            )
            for i in range(rng.randint(1, 25))
        ]
        result = packing_core.place_items(items, carton)
        if not result.success:
            continue
        successes += 1

        assert len(result.placements) == len(items)
        assert not packing_core.placements_overlap(result.placements)
        assert sum(p.weight for p in result.placements) <= carton.max_weight
        for p in result.placements:
            assert all(c >= 0 for c in p.position)
            mx, my, mz = p.max_corner
            assert mx <= carton.length and my <= carton.width and mz <= carton.height

    assert successes > 0


# ----------------------------
# Carton builder / sentinel
# ----------------------------


def test_carton_builder_rules():
    builder = m.CartonBuilder(small_box())
    with pytest.raises(ValueError):
        builder.build()

    heavy = m.PackItem("ANVIL", 1.0, 1.0, 1.0, weight=25.0)
    with pytest.raises(ValueError):
        builder.add(m.PlacedItem(heavy, heavy.dimensions, (0.0, 0.0, 0.0)))

    mug = three_mugs()[0]
    carton = builder.add(m.PlacedItem(mug, mug.dimensions, (0.0, 0.0, 0.0))).build()
    assert carton.item_count == 1
    assert carton.items_weight == pytest.approx(0.5)
    assert carton.gross_weight == pytest.approx(0.8)
    assert carton.fill_rate == pytest.approx(48.0 / 192.0)
    assert carton.weight_utilization == pytest.approx(2.5)


def test_no_fit_sentinel_is_falsy_singleton():
    assert not m.NO_FIT
    assert m.NoFit() is m.NO_FIT
    assert repr(m.NO_FIT) == "NO_FIT"
