import pytest
from pydantic import ValidationError

from retrosfx.config import RenderSettings, preset_from_label, wave_from_label
from retrosfx.errors import InvalidConfigError


def test_preset_from_label_normalises() -> None:
    assert preset_from_label(" Laser ") == "laser"
    with pytest.raises(InvalidConfigError):
        preset_from_label("coin")


def test_wave_aliases() -> None:
    assert wave_from_label("SAW") == "sawtooth"
    assert wave_from_label("sinewave") == "sine"
    with pytest.raises(InvalidConfigError):
        wave_from_label("triangle")


def test_render_settings_defaults() -> None:
    settings = RenderSettings.from_env({})
    assert settings == RenderSettings()
    assert settings.channels == 1
    assert settings.seed is None
    assert settings.max_frames == 30 * 44_100


def test_render_settings_from_env() -> None:
    settings = RenderSettings.from_env(
        {
            "RETROSFX_CHANNELS": "2",
            "RETROSFX_SAMPLE_FORMAT": "float",
            "RETROSFX_SEED": "42",
            "RETROSFX_MAX_SECONDS": "0.5",
            "RETROSFX_CHUNK_FRAMES": " ",
            "UNRELATED": "x",
        }
    )
    assert settings.channels == 2
    assert settings.sample_format == "float"
    assert settings.seed == 42
    assert settings.chunk_frames == 1024
    assert settings.max_frames == 22_050


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("RETROSFX_CHANNELS", "3"),
        ("RETROSFX_SAMPLE_FORMAT", "int24"),
        ("RETROSFX_CHUNK_FRAMES", "0"),
        ("RETROSFX_SEED", "-1"),
    ],
)
def test_invalid_env_value_raises(name: str, value: str) -> None:
    with pytest.raises(InvalidConfigError):
        RenderSettings.from_env({name: value})


def test_render_settings_are_frozen() -> None:
    settings = RenderSettings()
    with pytest.raises(ValidationError):
        settings.channels = 2  # type: ignore[misc]
