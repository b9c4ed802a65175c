from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

CONFIG_DIR = Path.home() / ".snapfit"
CONFIG_FILE = CONFIG_DIR / "snapfit.cfg"
DEFAULT_CONFIG = {
    "_comment": "Valid units: millimeters (default), meters, inches. Value is case-insensitive.",
    "units": "millimeters",
    "fillet_radius": 0.5,
    "draft_angle_deg": 1.0,
    "nozzle_diameter": 0.4,
}
_UNIT_INFO: Dict[str, Dict[str, Any]] = {
    "millimeters": {"label": "mm", "scale_to_mm": 1.0},
    "meters": {"label": "m", "scale_to_mm": 1000.0},
    "inches": {"label": "in", "scale_to_mm": 25.4},
}
_UNIT_ALIASES = {
    "millimeter": "millimeters",
    "millimeters": "millimeters",
    "mm": "millimeters",
    "meter": "meters",
    "meters": "meters",
    "m": "meters",
    "inch": "inches",
    "inches": "inches",
    "in": "inches",
}


@dataclass(frozen=True)
class UnitSettings:
    """Resolved units from snapfit.cfg."""

    name: str
    label: str
    scale_to_mm: float


@dataclass(frozen=True)
class FeatureDefaults:
    """Post-processing and printer defaults from snapfit.cfg, in millimeters/degrees."""

    fillet_radius: float
    draft_angle_deg: float
    nozzle_diameter: float


def ensure_user_config() -> None:
    """Ensure ~/.snapfit/snapfit.cfg exists with sane defaults."""

    try:
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        return

    if CONFIG_FILE.exists():
        return

    try:
        CONFIG_FILE.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + "\n")
    except OSError:
        return


def _load_user_config() -> Dict[str, Any]:
    ensure_user_config()
    try:
        loaded = json.loads(CONFIG_FILE.read_text())
    except (OSError, json.JSONDecodeError):
        return DEFAULT_CONFIG.copy()
    if not isinstance(loaded, dict):
        return DEFAULT_CONFIG.copy()
    return loaded


def normalize_units(value: str) -> str | None:
    key = value.strip().lower()
    if key in _UNIT_INFO:
        return key
    return _UNIT_ALIASES.get(key)


def unit_settings_for(name: str) -> UnitSettings:
    normalized = normalize_units(name)
    if normalized is None:
        raise ValueError(f"Unknown units '{name}'.")
    info = _UNIT_INFO[normalized]
    return UnitSettings(name=normalized, label=info["label"], scale_to_mm=info["scale_to_mm"])


def get_unit_settings() -> UnitSettings:
    """Return the configured units and the conversion to millimeters."""

    raw_config = _load_user_config()
    raw_units = str(raw_config.get("units", DEFAULT_CONFIG["units"]))
    normalized = normalize_units(raw_units)
    if normalized is None:
        normalized = DEFAULT_CONFIG["units"]
    return unit_settings_for(normalized)


def _float_setting(raw_config: Dict[str, Any], key: str) -> float:
    try:
        return float(raw_config.get(key, DEFAULT_CONFIG[key]))
    except (TypeError, ValueError):
        return float(DEFAULT_CONFIG[key])


def get_feature_defaults() -> FeatureDefaults:
    """Return fillet/draft/nozzle defaults, falling back per key on bad values."""

    raw_config = _load_user_config()
    return FeatureDefaults(
        fillet_radius=_float_setting(raw_config, "fillet_radius"),
        draft_angle_deg=_float_setting(raw_config, "draft_angle_deg"),
        nozzle_diameter=_float_setting(raw_config, "nozzle_diameter"),
    )
