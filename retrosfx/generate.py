"""Preset-driven random generation of sfxr parameters.

Each preset is a fixed sequence of PRNG draws mapped through the curves of
the classic sfxr tool. The draw order, constants and branch conditions below
decide the resulting sound, so they must not be reordered. Intermediate
values are rounded to binary32 wherever sfxr stores or computes in
single precision.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Literal, Mapping

from .errors import InvalidConfigError
from .params import GENERATED_FIELDS, WAVE_TYPES, SfxParams, clamp, default_params, to_f32
from .prng import Prng

_LOGGER = logging.getLogger("retrosfx.generate")

Preset = Literal["random", "pickup", "laser", "explosion", "powerup", "hit", "jump", "blip"]

PRESETS: tuple[Preset, ...] = (
    "random",
    "pickup",
    "laser",
    "explosion",
    "powerup",
    "hit",
    "jump",
    "blip",
)

PresetFn = Callable[[SfxParams, Prng], None]

_f32 = to_f32


def _plus(base: float, prng: Prng, scale: float) -> float:
    """``base + randf(scale)`` in single precision."""

    return _f32(_f32(base) + prng.next_float(scale))


def _minus(base: float, prng: Prng, scale: float) -> float:
    """``base - randf(scale)`` in single precision."""

    return _f32(_f32(base) - prng.next_float(scale))


def _centered(prng: Prng) -> float:
    """``randf(2) - 1``: a uniform value in [-1, 1]."""

    return _plus(-1.0, prng, 2.0)


def _random(params: SfxParams, prng: Prng) -> None:
    params.wave_type = WAVE_TYPES[prng.next_uint(3)]
    params.base_freq = _centered(prng) ** 2

    if prng.next_uint(1):
        params.base_freq = _centered(prng) ** 3 + 0.5

    params.freq_limit = 0.0
    params.freq_ramp = _centered(prng) ** 5

    if params.base_freq > _f32(0.7) and params.freq_ramp > _f32(0.2):
        params.freq_ramp = -params.freq_ramp

    if params.base_freq < _f32(0.2) and params.freq_ramp < _f32(-0.05):
        params.freq_ramp = -params.freq_ramp

    params.freq_dramp = _centered(prng) ** 3
    params.duty = _centered(prng)
    params.duty_ramp = _centered(prng) ** 3
    params.vib_strength = _centered(prng) ** 3
    params.vib_speed = _centered(prng)
    params.env_attack = _centered(prng) ** 3
    params.env_sustain = _centered(prng) ** 2
    params.env_decay = _centered(prng)
    params.env_punch = prng.next_float(0.8) ** 2

    envelope = _f32(_f32(params.env_attack + params.env_sustain) + params.env_decay)
    if envelope < _f32(0.2):
        params.env_sustain = params.env_sustain + _plus(0.2, prng, 0.3)
        params.env_decay = params.env_decay + _plus(0.2, prng, 0.3)

    params.lpf_resonance = _centered(prng)
    params.lpf_freq = 1.0 - prng.next_float(1.0) ** 3
    params.lpf_ramp = _centered(prng) ** 3

    if params.lpf_freq < _f32(0.1) and params.lpf_ramp < _f32(-0.05):
        params.lpf_ramp = -params.lpf_ramp

    params.hpf_freq = prng.next_float(1.0) ** 5
    params.hpf_ramp = _centered(prng) ** 5
    params.pha_offset = _centered(prng) ** 3
    params.pha_ramp = _centered(prng) ** 3
    params.repeat_speed = _centered(prng)
    params.arp_speed = _centered(prng)
    params.arp_mod = _centered(prng)


def _pickup(params: SfxParams, prng: Prng) -> None:
    params.base_freq = _plus(0.4, prng, 0.5)
    params.env_attack = 0.0
    params.env_sustain = prng.next_float(0.1)
    params.env_decay = _plus(0.1, prng, 0.4)
    params.env_punch = _plus(0.3, prng, 0.3)

    if prng.next_uint(1):
        params.arp_speed = _plus(0.5, prng, 0.2)
        params.arp_mod = _plus(0.2, prng, 0.4)


def _laser(params: SfxParams, prng: Prng) -> None:
    params.wave_type = WAVE_TYPES[prng.next_uint(2)]

    if params.wave_type == "sine" and prng.next_uint(1):
        params.wave_type = WAVE_TYPES[prng.next_uint(1)]

    params.base_freq = _plus(0.5, prng, 0.5)
    params.freq_limit = _f32(params.base_freq - _f32(0.2)) - prng.next_float(0.6)

    if params.freq_limit < _f32(0.2):
        params.freq_limit = 0.2

    params.freq_ramp = _minus(-0.15, prng, 0.2)

    if prng.next_uint(2) == 0:
        params.base_freq = _plus(0.3, prng, 0.6)
        params.freq_limit = prng.next_float(0.1)
        params.freq_ramp = _minus(-0.35, prng, 0.3)

    if prng.next_uint(1):
        params.duty = prng.next_float(0.5)
        params.duty_ramp = prng.next_float(0.2)
    else:
        params.duty = _plus(0.4, prng, 0.5)
        params.duty_ramp = -prng.next_float(0.7)

    params.env_attack = 0.0
    params.env_sustain = _plus(0.1, prng, 0.2)
    params.env_decay = prng.next_float(0.4)

    if prng.next_uint(1):
        params.env_punch = prng.next_float(0.3)

    if prng.next_uint(2) == 0:
        params.pha_offset = prng.next_float(0.2)
        params.pha_ramp = -prng.next_float(0.2)

    if prng.next_uint(1):
        params.hpf_freq = prng.next_float(0.3)


def _explosion(params: SfxParams, prng: Prng) -> None:
    params.wave_type = "noise"

    if prng.next_uint(1):
        params.base_freq = _plus(0.1, prng, 0.4)
        params.freq_ramp = _plus(-0.1, prng, 0.4)
    else:
        params.base_freq = _plus(0.2, prng, 0.7)
        params.freq_ramp = _minus(-0.2, prng, 0.2)

    params.base_freq = params.base_freq * params.base_freq

    if prng.next_uint(4) == 0:
        params.freq_ramp = 0.0

    if prng.next_uint(2) == 0:
        params.repeat_speed = _plus(0.3, prng, 0.5)

    params.env_attack = 0.0
    params.env_sustain = _plus(0.1, prng, 0.3)
    params.env_decay = prng.next_float(0.5)

    if prng.next_uint(1) == 0:
        params.pha_offset = _plus(-0.3, prng, 0.9)
        params.pha_ramp = -prng.next_float(0.3)

    params.env_punch = _plus(0.2, prng, 0.6)

    if prng.next_uint(1):
        params.vib_strength = prng.next_float(0.7)
        params.vib_speed = prng.next_float(0.6)

    if prng.next_uint(2) == 0:
        params.arp_speed = _plus(0.6, prng, 0.3)
        params.arp_mod = _minus(0.8, prng, 1.6)


def _powerup(params: SfxParams, prng: Prng) -> None:
    if prng.next_uint(1):
        params.wave_type = "sawtooth"
    else:
        params.duty = prng.next_float(0.6)

    if prng.next_uint(1):
        params.base_freq = _plus(0.2, prng, 0.3)
        params.freq_ramp = _plus(0.1, prng, 0.4)
        params.repeat_speed = _plus(0.4, prng, 0.4)
    else:
        params.base_freq = _plus(0.2, prng, 0.3)
        params.freq_ramp = _plus(0.05, prng, 0.2)

        if prng.next_uint(1):
            params.vib_strength = prng.next_float(0.7)
            params.vib_speed = prng.next_float(0.6)

    params.env_attack = 0.0
    params.env_sustain = prng.next_float(0.4)
    params.env_decay = _plus(0.1, prng, 0.4)


def _hit(params: SfxParams, prng: Prng) -> None:
    params.wave_type = WAVE_TYPES[prng.next_uint(2)]

    if params.wave_type == "sine":
        params.wave_type = "noise"

    if params.wave_type == "square":
        params.duty = prng.next_float(0.6)

    params.base_freq = _plus(0.2, prng, 0.6)
    params.freq_ramp = _minus(-0.3, prng, 0.4)
    params.env_attack = 0.0
    params.env_sustain = prng.next_float(0.1)
    params.env_decay = _plus(0.1, prng, 0.2)

    if prng.next_uint(1):
        params.hpf_freq = prng.next_float(0.3)


def _jump(params: SfxParams, prng: Prng) -> None:
    params.wave_type = "square"
    params.duty = prng.next_float(0.6)
    params.base_freq = _plus(0.3, prng, 0.3)
    params.freq_ramp = _plus(0.1, prng, 0.2)
    params.env_attack = 0.0
    params.env_sustain = _plus(0.1, prng, 0.3)
    params.env_decay = _plus(0.1, prng, 0.2)

    if prng.next_uint(1):
        params.hpf_freq = prng.next_float(0.3)

    if prng.next_uint(1):
        params.lpf_freq = _minus(1.0, prng, 0.6)


def _blip(params: SfxParams, prng: Prng) -> None:
    params.wave_type = WAVE_TYPES[prng.next_uint(1)]

    if params.wave_type == "square":
        params.duty = prng.next_float(0.6)

    params.base_freq = _plus(0.2, prng, 0.4)
    params.env_attack = 0.0
    params.env_sustain = _plus(0.1, prng, 0.1)
    params.env_decay = prng.next_float(0.2)
    params.hpf_freq = 0.1


PRESET_BODIES: Mapping[Preset, PresetFn] = MappingProxyType(
    {
        "random": _random,
        "pickup": _pickup,
        "laser": _laser,
        "explosion": _explosion,
        "powerup": _powerup,
        "hit": _hit,
        "jump": _jump,
        "blip": _blip,
    }
)


def mutate(params: SfxParams, prng: Prng) -> SfxParams:
    """Run one mutation round in place: nudge each field by up to +/-0.05."""

    for name in GENERATED_FIELDS:
        if prng.next_uint(1):
            delta = _f32(prng.next_float(0.1) - _f32(0.05))
            setattr(params, name, getattr(params, name) + delta)
    return clamp(params)


def generate(preset: Preset, mutations: int = 0, seed: int = 0) -> SfxParams:
    """Build the parameters for ``preset`` from ``seed``.

    The same preset, mutation count and seed always produce the same model.
    """

    try:
        body = PRESET_BODIES[preset]
    except KeyError as exc:
        raise InvalidConfigError(f"Unknown preset: {preset!r}") from exc
    if mutations < 0:
        raise InvalidConfigError(f"mutations must be >= 0, got {mutations}")

    prng = Prng(seed)
    params = default_params()
    body(params, prng)
    clamp(params)

    for _ in range(mutations):
        mutate(params, prng)

    _LOGGER.debug(
        "Generated %s sound (seed=%d, mutations=%d, wave=%s)",
        preset,
        seed,
        mutations,
        params.wave_type,
    )
    return params


def generation_snippet(preset: Preset, mutations: int = 0, seed: int = 0) -> str:
    """The Python call that regenerates the same sound at runtime."""

    if preset not in PRESET_BODIES:
        raise InvalidConfigError(f"Unknown preset: {preset!r}")
    return f"params = retrosfx.generate({preset!r}, mutations={mutations}, seed={seed})"
