import json

import pytest

from carton_api import config
from carton_api.models import InvalidInputError


def catalog_dicts():
    return [
        {"name": "POLY_MAILER", "length": 12, "width": 9, "height": 1, "max_weight": 3, "cost": 0.2},
        {"name": "CUBE_BOX", "length": 10, "width": 10, "height": 10, "max_weight": 30, "tare_weight": 0.8, "cost": 1.1},
    ]


def test_default_config():
    cfg = config.EngineConfig()

    assert [ct.name for ct in cfg.catalog] == [
        "SMALL_BOX",
        "MEDIUM_BOX",
        "LARGE_BOX",
        "EXTRA_LARGE_BOX",
    ]
    assert cfg.catalog[0].volume == 192
    assert cfg.optimal_fill_rate == 0.75
    assert cfg.volume_margin == 0.80
    assert cfg.max_attempts == 10
    assert cfg.weights.utilization + cfg.weights.weight_efficiency + cfg.weights.cost + cfg.weights.protection == pytest.approx(1.0)


def test_parse_catalog():
    catalog = config.parse_catalog(catalog_dicts())

    assert [ct.name for ct in catalog] == ["POLY_MAILER", "CUBE_BOX"]
    assert catalog[0].tare_weight == 0.0
    assert catalog[1].cost == pytest.approx(1.1)


def test_parse_catalog_rejects_bad_entries():
    bad = catalog_dicts()
    bad[1]["height"] = 0
    with pytest.raises(InvalidInputError):
        config.parse_catalog(bad)


def test_load_catalog_and_env(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(catalog_dicts()), encoding="utf-8")

    assert len(config.load_catalog(str(path))) == 2

    cfg = config.config_from_env({config.CATALOG_ENV_VAR: str(path)})
    assert [ct.name for ct in cfg.catalog] == ["POLY_MAILER", "CUBE_BOX"]

    assert config.config_from_env({}).catalog == config.DEFAULT_CATALOG


def test_with_catalog_keeps_settings():
    cfg = config.EngineConfig(max_attempts=3, volume_margin=0.9)
    other = cfg.with_catalog(config.parse_catalog(catalog_dicts()))

    assert other.max_attempts == 3
    assert other.volume_margin == 0.9
    assert len(other.catalog) == 2


@pytest.mark.parametrize(
    "kwargs",
    [{"volume_margin": 0.0}, {"volume_margin": 1.5}, {"max_attempts": 0}, {"catalog": None}],
)
def test_invalid_config(kwargs):
    with pytest.raises(InvalidInputError):
        config.EngineConfig(**kwargs)
