import json

import pytest

from choro.settings import Settings, load_presets, load_settings


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch):
    monkeypatch.delenv("CHORO_CONFIG", raising=False)


def test_default_preset():
    settings = load_settings()
    assert settings.preset == "health"
    assert settings.scale_mode == "adaptive"
    assert settings.no_data_fill == "pattern:hatch"
    assert settings.step_interval_ms == 100


def test_deaths_preset():
    settings = load_settings(preset="deaths")
    assert settings.projection == "mercator"
    assert settings.join_property == "id"
    assert len(settings.fixed_domain) == len(settings.fixed_palette) == 9


def test_presets_file_is_valid():
    for name, values in load_presets().items():
        load_settings(preset=name)
        assert set(values) <= set(Settings.__dataclass_fields__)


def test_user_file_overrides_preset(tmp_path):
    path = tmp_path / "map.json"
    path.write_text(json.dumps({"preset": "deaths", "max_zoom": 4}))
    settings = load_settings(config_path=path)
    assert settings.preset == "deaths"
    assert settings.max_zoom == 4
    assert settings.projection == "mercator"


def test_env_var_config(tmp_path, monkeypatch):
    path = tmp_path / "env.json"
    path.write_text(json.dumps({"transition_ms": 300}))
    monkeypatch.setenv("CHORO_CONFIG", str(path))
    assert load_settings().transition_ms == 300


def test_keyword_overrides_win(tmp_path):
    path = tmp_path / "map.json"
    path.write_text(json.dumps({"adaptive_steps": 4}))
    assert load_settings(config_path=path, adaptive_steps=3).adaptive_steps == 3


def test_region_offsets_are_lower_cased():
    settings = load_settings(region_offsets={"Africa": [0.1, 0]})
    assert settings.region_offsets == {"africa": (0.1, 0)}


def test_unknown_setting_rejected():
    with pytest.raises(ValueError):
        load_settings(colour="red")


def test_unknown_preset_rejected():
    with pytest.raises(KeyError):
        load_settings(preset="nope")


@pytest.mark.parametrize("overrides", [
    {"projection": "orthographic"},
    {"scale_mode": "quantile"},
    {"min_zoom": 5, "max_zoom": 2},
    {"step_interval_ms": 0},
    {"scale_mode": "fixed", "fixed_domain": [0, 1], "fixed_palette": ["#fff"]},
])
def test_invalid_settings(overrides):
    with pytest.raises(ValueError):
        load_settings(**overrides)


def test_presets_pick_the_observation_key():
    assert load_settings(preset="health").observation_key == "name"
    assert load_settings(preset="deaths").observation_key == "code"
    with pytest.raises(ValueError):
        load_settings(observation_key="iso")
