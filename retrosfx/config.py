from __future__ import annotations

import logging
import os
from typing import Mapping, cast

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidConfigError
from .frames import SAMPLE_RATE, SampleFormat
from .generate import PRESETS, Preset
from .params import WaveType

_LOGGER = logging.getLogger("retrosfx.config")

_ENV_PREFIX = "RETROSFX_"

_WAVE_ALIASES: Mapping[str, WaveType] = {
    "square": "square",
    "sawtooth": "sawtooth",
    "saw": "sawtooth",
    "sine": "sine",
    "sinewave": "sine",
    "noise": "noise",
}


def preset_from_label(value: str) -> Preset:
    label = value.strip().lower()
    if label not in PRESETS:
        expected = ", ".join(PRESETS)
        raise InvalidConfigError(f"Unknown preset: {value!r} (expected one of {expected})")
    return cast(Preset, label)


def wave_from_label(value: str) -> WaveType:
    try:
        return _WAVE_ALIASES[value.strip().lower()]
    except KeyError as exc:
        raise InvalidConfigError(f"Unknown wave type: {value!r}") from exc


class RenderSettings(BaseModel):
    """How a note is turned into frames when rendering outside a host."""

    channels: int = Field(default=1, ge=1, le=2)
    sample_format: SampleFormat = "int16"
    chunk_frames: int = Field(default=1024, gt=0)
    max_seconds: float = Field(default=30.0, gt=0.0)
    seed: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def max_frames(self) -> int:
        return int(self.max_seconds * SAMPLE_RATE)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RenderSettings":
        """Build settings from ``RETROSFX_*`` variables, falling back to defaults."""

        source = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for name in cls.model_fields:
            raw = source.get(f"{_ENV_PREFIX}{name.upper()}")
            if raw is not None and raw.strip():
                values[name] = raw.strip()
        try:
            settings = cls.model_validate(values, strict=False)
        except ValidationError as exc:
            raise InvalidConfigError(f"Invalid render settings in environment: {exc}") from exc
        if values:
            _LOGGER.debug("Render settings from environment: %s", values)
        return settings
