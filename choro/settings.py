"""
Viewer settings.

Defaults live in the ``Settings`` dataclass; named presets in
``config/presets.json`` override them, and an optional user JSON file
(``--config`` or the ``CHORO_CONFIG`` environment variable) overrides the
preset.

Usage
-----
    settings = load_settings(preset="deaths")
    settings = load_settings(config_path=Path("my_map.json"))
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .geo.projection import PROJECTIONS
from .geo.viewport import DEFAULT_REGION_OFFSETS

log = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent / "config"
PRESETS_PATH = CONFIG_DIR / "presets.json"
CONFIG_ENV = "CHORO_CONFIG"


@dataclass
class Settings:
    """Everything a visualization session and its shell need to know."""

    preset: str = "health"

    # Geometry / join
    join_property: str = "name"         # feature property matched against entity codes
    observation_key: str = "name"       # "code" or "name": which column is the entity key
    name_property: str = "name"
    region_property: str = "continent"
    projection: str = "natural_earth"
    padding: float = 20.0

    # Viewport
    viewport_width: int = 960
    viewport_height: int = 500
    fit_margin: float = 0.9
    min_zoom: float = 1.0
    max_zoom: float = 8.0
    region_offsets: Dict[str, Tuple[float, float]] = field(
        default_factory=lambda: dict(DEFAULT_REGION_OFFSETS)
    )

    # Colour
    scale_mode: str = "adaptive"        # "adaptive" or "fixed"
    palette: str = "blues"
    adaptive_steps: int = 5
    fixed_domain: List[float] = field(default_factory=list)
    fixed_palette: List[str] = field(default_factory=list)
    no_data_fill: str = "pattern:hatch"
    suppressed_opacity: float = 0.1
    universal_region: str = "world"

    # Animation
    step_interval_ms: int = 100
    transition_ms: int = 750

    log_dir: str = "logs"

    def validate(self) -> "Settings":
        if self.projection not in PROJECTIONS:
            raise ValueError(f"Unknown projection '{self.projection}'")
        if self.observation_key not in ("code", "name"):
            raise ValueError(f"Unknown observation_key '{self.observation_key}'")
        if self.scale_mode not in ("adaptive", "fixed"):
            raise ValueError(f"Unknown scale_mode '{self.scale_mode}'")
        if self.scale_mode == "fixed" and len(self.fixed_domain) != len(self.fixed_palette):
            raise ValueError("fixed_domain and fixed_palette must have the same length")
        if not 0 < self.min_zoom <= self.max_zoom:
            raise ValueError("Zoom extent must satisfy 0 < min_zoom <= max_zoom")
        if self.step_interval_ms <= 0:
            raise ValueError("step_interval_ms must be positive")
        return self


_FIELD_NAMES = {f.name for f in fields(Settings)}


def _apply(settings: Settings, overrides: Dict[str, Any], origin: str) -> Settings:
    unknown = sorted(set(overrides) - _FIELD_NAMES)
    if unknown:
        raise ValueError(f"Unknown setting(s) in {origin}: {', '.join(unknown)}")
    if "region_offsets" in overrides:
        overrides = dict(overrides)
        overrides["region_offsets"] = {
            k.lower(): tuple(v) for k, v in overrides["region_offsets"].items()
        }
    return replace(settings, **overrides)


def load_presets(path: Path = PRESETS_PATH) -> Dict[str, Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_settings(
    preset: Optional[str] = None,
    config_path: Optional[Path] = None,
    **overrides: Any,
) -> Settings:
    """Resolve defaults → preset → user config file → keyword overrides."""
    user: Dict[str, Any] = {}
    if config_path is None and os.environ.get(CONFIG_ENV):
        config_path = Path(os.environ[CONFIG_ENV])
    if config_path is not None:
        with Path(config_path).open("r", encoding="utf-8") as f:
            user = json.load(f)
        log.info("Loaded settings from %s", config_path)

    name = preset or user.get("preset") or Settings.preset
    presets = load_presets()
    if name not in presets:
        raise KeyError(f"Preset '{name}' not found in presets.json")

    settings = _apply(Settings(preset=name), presets[name], f"preset '{name}'")
    settings = _apply(settings, user, str(config_path))
    settings = _apply(settings, overrides, "overrides")
    if preset:
        settings.preset = preset
    return settings.validate()
