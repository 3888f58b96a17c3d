from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Literal, Mapping

import numpy as np
from pydantic import BaseModel, ConfigDict, field_validator

from .errors import InvalidConfigError

_LOGGER = logging.getLogger("retrosfx.params")

WaveType = Literal["square", "sawtooth", "sine", "noise"]

# Wire order: the codec stores the index into this tuple.
WAVE_TYPES: tuple[WaveType, ...] = ("square", "sawtooth", "sine", "noise")

UNIPOLAR: tuple[float, float] = (0.0, 1.0)
BIPOLAR: tuple[float, float] = (-1.0, 1.0)

FLOAT_FIELDS: tuple[str, ...] = (
    "base_freq",
    "freq_limit",
    "freq_ramp",
    "freq_dramp",
    "duty",
    "duty_ramp",
    "vib_strength",
    "vib_speed",
    "env_attack",
    "env_sustain",
    "env_decay",
    "env_punch",
    "lpf_resonance",
    "lpf_freq",
    "lpf_ramp",
    "hpf_freq",
    "hpf_ramp",
    "pha_offset",
    "pha_ramp",
    "repeat_speed",
    "arp_speed",
    "arp_mod",
    "sound_vol",
)

BIPOLAR_FIELDS: frozenset[str] = frozenset(
    {
        "freq_ramp",
        "freq_dramp",
        "duty_ramp",
        "lpf_ramp",
        "hpf_ramp",
        "pha_offset",
        "pha_ramp",
        "arp_mod",
    }
)

# Fields touched by clamp() and mutate(), in mutation draw order.
GENERATED_FIELDS: tuple[str, ...] = (
    "base_freq",
    "freq_ramp",
    "freq_dramp",
    "duty",
    "duty_ramp",
    "vib_strength",
    "vib_speed",
    "env_attack",
    "env_sustain",
    "env_decay",
    "env_punch",
    "lpf_resonance",
    "lpf_freq",
    "lpf_ramp",
    "hpf_freq",
    "hpf_ramp",
    "pha_offset",
    "pha_ramp",
    "repeat_speed",
    "arp_speed",
    "arp_mod",
)

FIELD_DOMAINS: Mapping[str, tuple[float, float]] = MappingProxyType(
    {name: BIPOLAR if name in BIPOLAR_FIELDS else UNIPOLAR for name in FLOAT_FIELDS}
)


def to_f32(value: float) -> float:
    """Round a Python float to the nearest IEEE754 binary32 value."""

    return float(np.float32(value))


def field_domain(name: str) -> tuple[float, float]:
    return FIELD_DOMAINS[name]


def wave_id(wave_type: WaveType) -> int:
    return WAVE_TYPES.index(wave_type)


def wave_from_id(value: int) -> WaveType:
    if not 0 <= value < len(WAVE_TYPES):
        raise InvalidConfigError(f"Unknown wave type id: {value}")
    return WAVE_TYPES[value]


class SfxParams(BaseModel):
    """A complete sfxr sound: wave shape plus normalized synthesis controls.

    Float fields are always held at binary32 precision, both on construction
    and on assignment, so a model survives the binary codec unchanged.
    """

    wave_type: WaveType = "square"

    base_freq: float = 0.3
    freq_limit: float = 0.0
    freq_ramp: float = 0.0
    freq_dramp: float = 0.0
    duty: float = 0.0
    duty_ramp: float = 0.0

    vib_strength: float = 0.0
    vib_speed: float = 0.0

    env_attack: float = 0.0
    env_sustain: float = 0.3
    env_decay: float = 0.4
    env_punch: float = 0.0

    lpf_resonance: float = 0.0
    lpf_freq: float = 1.0
    lpf_ramp: float = 0.0
    hpf_freq: float = 0.0
    hpf_ramp: float = 0.0

    pha_offset: float = 0.0
    pha_ramp: float = 0.0

    repeat_speed: float = 0.0

    arp_speed: float = 0.0
    arp_mod: float = 0.0

    sound_vol: float = 0.5

    model_config = ConfigDict(extra="forbid", validate_assignment=True, validate_default=True)

    @field_validator(*FLOAT_FIELDS)
    @classmethod
    def _round_to_binary32(cls, value: float) -> float:
        return to_f32(value)

    @property
    def wave_id(self) -> int:
        return wave_id(self.wave_type)


def default_params() -> SfxParams:
    """The canonical baseline every preset and every load starts from."""

    return SfxParams()


def clamp(params: SfxParams) -> SfxParams:
    """Force every generated field into its domain, in place."""

    for name in GENERATED_FIELDS:
        low, high = FIELD_DOMAINS[name]
        value = getattr(params, name)
        if value < low:
            setattr(params, name, low)
        elif value > high:
            setattr(params, name, high)
    return params


def out_of_domain(params: SfxParams) -> list[str]:
    """Names of generated fields currently outside their domain."""

    offenders: list[str] = []
    for name in GENERATED_FIELDS:
        low, high = FIELD_DOMAINS[name]
        if not low <= getattr(params, name) <= high:
            offenders.append(name)
    if offenders:
        _LOGGER.debug("Fields outside their domain: %s", ", ".join(offenders))
    return offenders


def in_domain(params: SfxParams) -> bool:
    return not out_of_domain(params)
