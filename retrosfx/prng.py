"""Newlib-style 64-bit linear congruential generator.

Every random decision in the package (preset generation, mutation, the
noise oscillator) goes through this generator so that an identical seed and
call sequence always reproduces identical output.
"""

from __future__ import annotations

import numpy as np

UINT32_MAX = 0xFFFF_FFFF
_UINT64_MASK = 0xFFFF_FFFF_FFFF_FFFF
_MULTIPLIER = 6364136223846793005
# float32(UINT32_MAX) rounds up to 2**32
_UINT32_MAX_F32 = np.float32(UINT32_MAX)


class Prng:
    __slots__ = ("_state",)

    def __init__(self, seed: int = 1) -> None:
        self._state = 1
        self.seed(seed)

    @property
    def state(self) -> int:
        return self._state

    def seed(self, seed: int) -> None:
        state = seed & _UINT64_MASK
        self._state = state if state != 0 else 1

    def copy(self) -> "Prng":
        clone = Prng.__new__(Prng)
        clone._state = self._state
        return clone

    def _draw(self) -> int:
        self._state = (_MULTIPLIER * self._state + 1) & _UINT64_MASK
        return self._state >> 32

    def next_uint(self, max_inclusive: int) -> int:
        """Uniform integer in ``[0, max_inclusive]`` without modulo bias."""

        if max_inclusive >= UINT32_MAX:
            return self._draw()
        span = max_inclusive + 1
        limit = ((UINT32_MAX + 1) // span) * span
        while True:
            value = self._draw()
            if value < limit:
                return value % span

    def next_float(self, scale: float) -> float:
        """Uniform float in ``[0, scale]``, computed in binary32."""

        value = np.float32(self.next_uint(UINT32_MAX)) * np.float32(scale) / _UINT32_MAX_F32
        return float(value)

    def __repr__(self) -> str:
        return f"Prng(state={self._state:#018x})"
