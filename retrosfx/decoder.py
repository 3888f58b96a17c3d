"""Per-sample sfxr synthesis.

A :class:`Decoder` owns a copy of the parameters, its own PRNG and every bit
of running state (oscillator phase, envelope, filters, phaser ring, noise
ring). One decoder plays one voice; play several voices with several
decoders.

Each output sample runs, in order: repeat timer, arpeggio, frequency slide,
vibrato, duty slide, envelope, phaser step, high-pass cutoff ramp, then 8
oscillator supersamples each passed through the low-pass, high-pass and
phaser before being averaged.

The period and slide state is double precision. Everything else (duty,
envelope volume, filter state, phaser offset, vibrato, samples) is binary32
and is rounded with :func:`~retrosfx.params.to_f32` every time it is stored,
so the output stream matches the classic single precision synth sample for
sample.
"""

from __future__ import annotations

import logging
import math

from .params import SfxParams, to_f32
from .prng import Prng

_LOGGER = logging.getLogger("retrosfx.decoder")

QUICK_SEED = 0x89866AE81AA30A2B
PHASER_SIZE = 1024
NOISE_SIZE = 32
SUPERSAMPLES = 8
MIN_PERIOD = 8

_ATTACK, _SUSTAIN, _DECAY, _DONE = 0, 1, 2, 3

_f32 = to_f32

# binary32 literals
_PI = _f32(math.pi)
_TENTH = _f32(0.1)
_HUNDREDTH = _f32(0.01)
_MAX_DAMPING = _f32(0.8)
_MIN_HIGHPASS = _f32(0.00001)
_LPF_RAMP_SCALE = _f32(0.0001)
_HPF_RAMP_SCALE = _f32(0.0003)
_DUTY_RAMP_SCALE = _f32(0.00005)


def _stage_ratio(time: int, length: int) -> float:
    if length == 0:
        return 0.0
    return _f32(time / length)


def _timer_limit(speed: float) -> int:
    return int(_f32(1.0 - speed) ** 2 * 20000 + 32)


class Decoder:
    """A single playing sfxr voice. Idle until :meth:`start` is called."""

    def __init__(self) -> None:
        self._params = SfxParams()
        self._seed = QUICK_SEED
        self._prng = Prng(QUICK_SEED)
        self._playing = False

        self._phaser_buffer = [0.0] * PHASER_SIZE
        self._noise_buffer = [0.0] * NOISE_SIZE

        self._phase = 0
        self._period = MIN_PERIOD
        self._fperiod = 0.0
        self._fmaxperiod = 0.0
        self._fslide = 0.0
        self._fdslide = 0.0
        self._square_duty = 0.0
        self._square_slide = 0.0

        self._env_stage = _ATTACK
        self._env_time = 0
        self._env_length = [0, 0, 0]
        self._env_vol = 0.0

        self._fphase = 0.0
        self._fdphase = 0.0
        self._iphase = 0
        self._ipp = 0

        self._fltp = 0.0
        self._fltdp = 0.0
        self._fltw = 0.0
        self._fltw_d = 0.0
        self._fltdmp = 0.0
        self._fltphp = 0.0
        self._flthp = 0.0
        self._flthp_d = 0.0

        self._vib_phase = 0.0
        self._vib_speed = 0.0
        self._vib_amp = 0.0

        self._rep_time = 0
        self._rep_limit = 0
        self._arp_time = 0
        self._arp_limit = 0
        self._arp_mod = 1.0

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def params(self) -> SfxParams:
        return self._params.model_copy()

    @property
    def seed(self) -> int:
        return self._seed

    def start(self, params: SfxParams, seed: int = QUICK_SEED) -> "Decoder":
        self._params = params.model_copy()
        self._seed = seed
        self._prng.seed(seed)
        self._full_reset()
        self._playing = True
        _LOGGER.debug("Decoder started (wave=%s, seed=%#x)", params.wave_type, seed)
        return self

    def start_quick(self, params: SfxParams) -> "Decoder":
        return self.start(params, QUICK_SEED)

    def restart(self) -> "Decoder":
        """Replay the stored parameters from the beginning, as if just started."""

        self._prng.seed(self._seed)
        self._full_reset()
        self._playing = True
        return self

    def stop(self) -> None:
        self._playing = False

    # -- resets ---------------------------------------------------------------

    def _reset_frequency(self) -> None:
        p = self._params
        self._fperiod = 100.0 / (_f32(p.base_freq * p.base_freq) + 0.001)
        self._period = int(self._fperiod)
        self._fmaxperiod = 100.0 / (_f32(p.freq_limit * p.freq_limit) + 0.001)
        self._fslide = 1.0 - p.freq_ramp**3 * 0.01
        self._fdslide = -(p.freq_dramp**3) * 0.000001
        self._square_duty = _f32(0.5 - _f32(p.duty * 0.5))
        self._square_slide = _f32(-p.duty_ramp * _DUTY_RAMP_SCALE)

        if p.arp_mod >= 0.0:
            self._arp_mod = 1.0 - p.arp_mod**2 * 0.9
        else:
            self._arp_mod = 1.0 + p.arp_mod**2 * 10.0
        self._arp_time = 0
        self._arp_limit = 0 if p.arp_speed == 1.0 else _timer_limit(p.arp_speed)

    def _base_cutoff(self) -> float:
        return _f32(self._params.lpf_freq**3 * _TENTH)

    def _derive_constants(self) -> None:
        p = self._params
        self._fltw_d = _f32(1.0 + _f32(p.lpf_ramp * _LPF_RAMP_SCALE))
        damping = 5.0 / (1.0 + p.lpf_resonance**2 * 20.0) * _f32(_HUNDREDTH + self._base_cutoff())
        self._fltdmp = min(_f32(damping), _MAX_DAMPING)
        self._flthp_d = _f32(1.0 + _f32(p.hpf_ramp * _HPF_RAMP_SCALE))

        self._vib_speed = _f32(p.vib_speed**2 * _HUNDREDTH)
        self._vib_amp = _f32(p.vib_strength * 0.5)

        self._env_length = [
            int(_f32(_f32(p.env_attack * p.env_attack) * 100000.0)),
            int(_f32(_f32(p.env_sustain * p.env_sustain) * 100000.0)),
            int(_f32(_f32(p.env_decay * p.env_decay) * 100000.0)),
        ]

        self._fdphase = _f32(p.pha_ramp**2)
        if p.pha_ramp < 0.0:
            self._fdphase = -self._fdphase

        self._rep_limit = 0 if p.repeat_speed == 0.0 else _timer_limit(p.repeat_speed)

    def _fill_noise(self) -> None:
        noise = self._noise_buffer
        for index in range(NOISE_SIZE):
            noise[index] = _f32(self._prng.next_float(2.0) - 1.0)

    def _full_reset(self) -> None:
        p = self._params
        self._phase = 0
        self._reset_frequency()
        self._derive_constants()

        self._fltp = 0.0
        self._fltdp = 0.0
        self._fltw = self._base_cutoff()
        self._fltphp = 0.0
        self._flthp = _f32(p.hpf_freq**2 * _TENTH)

        self._vib_phase = 0.0

        self._env_vol = 0.0
        self._env_stage = _ATTACK
        self._env_time = 0

        self._fphase = _f32(p.pha_offset**2 * 1020.0)
        if p.pha_offset < 0.0:
            self._fphase = -self._fphase
        self._iphase = abs(int(self._fphase))
        self._ipp = 0

        phaser = self._phaser_buffer
        for index in range(PHASER_SIZE):
            phaser[index] = 0.0
        self._fill_noise()

        self._rep_time = 0

    def _soft_reset(self) -> None:
        """Re-derive the note's constants mid-note, keeping the oscillator phase."""

        self._reset_frequency()
        self._derive_constants()
        self._fill_noise()

    # -- synthesis ------------------------------------------------------------

    def _finish(self) -> float:
        self._playing = False
        return 0.0

    def produce(self) -> float:
        """Return the next sample in [-1, 1], or 0.0 once the note has ended."""

        if not self._playing:
            return 0.0
        p = self._params

        self._rep_time += 1
        if self._rep_limit != 0 and self._rep_time >= self._rep_limit:
            self._rep_time = 0
            self._soft_reset()

        self._arp_time += 1
        if self._arp_limit != 0 and self._arp_time >= self._arp_limit:
            self._arp_limit = 0
            self._fperiod *= self._arp_mod

        self._fslide += self._fdslide
        self._fperiod *= self._fslide
        if self._fperiod > self._fmaxperiod:
            self._fperiod = self._fmaxperiod
            if p.freq_limit > 0.0:
                return self._finish()

        rfperiod = _f32(self._fperiod)
        if self._vib_amp > 0.0:
            self._vib_phase = _f32(self._vib_phase + self._vib_speed)
            vibrato = 1.0 + math.sin(self._vib_phase) * self._vib_amp
            rfperiod = _f32(self._fperiod * vibrato)

        self._period = max(int(rfperiod), MIN_PERIOD)

        self._square_duty = min(max(_f32(self._square_duty + self._square_slide), 0.0), 0.5)

        self._env_time += 1
        if self._env_time > self._env_length[self._env_stage]:
            self._env_time = 0
            self._env_stage += 1
            if self._env_stage == _DONE:
                return self._finish()

        if self._env_stage == _ATTACK:
            self._env_vol = _stage_ratio(self._env_time, self._env_length[_ATTACK])
        elif self._env_stage == _SUSTAIN:
            remaining = _f32(1.0 - _stage_ratio(self._env_time, self._env_length[_SUSTAIN]))
            self._env_vol = _f32(1.0 + remaining * 2.0 * p.env_punch)
        else:
            self._env_vol = _f32(1.0 - _stage_ratio(self._env_time, self._env_length[_DECAY]))

        self._fphase = _f32(self._fphase + self._fdphase)
        self._iphase = min(abs(int(self._fphase)), PHASER_SIZE - 1)

        if self._flthp_d != 0.0:
            flthp = _f32(self._flthp * self._flthp_d)
            self._flthp = min(max(flthp, _MIN_HIGHPASS), _TENTH)

        total = self._supersample(p)

        sample = _f32(_f32(total / SUPERSAMPLES) * _f32(2.0 * p.sound_vol))
        if sample > 1.0:
            return 1.0
        if sample < -1.0:
            return -1.0
        return sample

    def _supersample(self, p: SfxParams) -> float:
        f32 = _f32
        wave = p.wave_type
        period = self._period
        duty = self._square_duty
        env_vol = self._env_vol
        filtered = p.lpf_freq != 1.0
        fltw_d = self._fltw_d
        fltdmp = self._fltdmp
        flthp = self._flthp
        noise = self._noise_buffer
        phaser = self._phaser_buffer
        offset = self._iphase
        mask = PHASER_SIZE - 1

        phase = self._phase
        fltp = self._fltp
        fltdp = self._fltdp
        fltw = self._fltw
        fltphp = self._fltphp
        ipp = self._ipp
        total = 0.0

        for _ in range(SUPERSAMPLES):
            phase += 1
            if phase >= period:
                phase %= period
                if wave == "noise":
                    self._fill_noise()

            fp = f32(phase / period)
            if wave == "square":
                sample = 0.5 if fp < duty else -0.5
            elif wave == "sawtooth":
                sample = f32(1.0 - fp * 2.0)
            elif wave == "sine":
                sample = f32(math.sin(f32(fp * 2.0 * _PI)))
            else:
                sample = noise[phase * NOISE_SIZE // period]

            # low-pass
            previous = fltp
            fltw = min(max(f32(fltw * fltw_d), 0.0), _TENTH)
            if filtered:
                fltdp = f32(fltdp + f32(f32(sample - fltp) * fltw))
                fltdp = f32(fltdp - f32(fltdp * fltdmp))
            else:
                fltp = sample
                fltdp = 0.0
            fltp = f32(fltp + fltdp)

            # high-pass
            fltphp = f32(fltphp + f32(fltp - previous))
            fltphp = f32(fltphp - f32(fltphp * flthp))
            sample = fltphp

            # phaser
            phaser[ipp & mask] = sample
            sample = f32(sample + phaser[(ipp - offset + PHASER_SIZE) & mask])
            ipp = (ipp + 1) & mask

            total = f32(total + f32(sample * env_vol))

        self._phase = phase
        self._fltp = fltp
        self._fltdp = fltdp
        self._fltw = fltw
        self._fltphp = fltphp
        self._ipp = ipp
        return total


def start(params: SfxParams, seed: int = QUICK_SEED) -> Decoder:
    """Create a decoder already playing ``params``."""

    return Decoder().start(params, seed)


def start_quick(params: SfxParams) -> Decoder:
    return Decoder().start_quick(params)
