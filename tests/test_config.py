from __future__ import annotations

import json

import pytest

from snapfit import _config


def test_config_created_with_defaults(config_file):
    assert not config_file.exists()
    settings = _config.get_unit_settings()
    assert config_file.exists()
    assert settings.name == "millimeters"
    assert settings.scale_to_mm == pytest.approx(1.0)
    assert json.loads(config_file.read_text())["units"] == "millimeters"


def test_existing_config_is_not_overwritten(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text(json.dumps({"units": "Inches"}))
    _config.ensure_user_config()
    assert json.loads(config_file.read_text()) == {"units": "Inches"}
    assert _config.get_unit_settings().label == "in"


def test_unknown_units_fall_back_to_millimeters(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text(json.dumps({"units": "cubits"}))
    assert _config.get_unit_settings().name == "millimeters"


@pytest.mark.parametrize("payload", ["{not json", "[1, 2, 3]"])
def test_broken_config_uses_defaults(config_file, payload):
    config_file.parent.mkdir(parents=True)
    config_file.write_text(payload)
    defaults = _config.get_feature_defaults()
    assert defaults.fillet_radius == pytest.approx(0.5)
    assert defaults.draft_angle_deg == pytest.approx(1.0)
    assert defaults.nozzle_diameter == pytest.approx(0.4)


def test_bad_value_falls_back_per_key(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text(json.dumps({"fillet_radius": "big", "nozzle_diameter": 0.6}))
    defaults = _config.get_feature_defaults()
    assert defaults.fillet_radius == pytest.approx(0.5)
    assert defaults.nozzle_diameter == pytest.approx(0.6)


@pytest.mark.parametrize(
    ("alias", "expected"),
    [("mm", "millimeters"), ("M", "meters"), (" inch ", "inches"), ("furlong", None)],
)
def test_normalize_units(alias, expected):
    assert _config.normalize_units(alias) == expected


def test_unit_settings_for_unknown():
    with pytest.raises(ValueError):
        _config.unit_settings_for("parsecs")
