from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import numpy as np
import soundfile as sf  # type: ignore[import]
from numpy.typing import NDArray

from .decoder import QUICK_SEED, Decoder
from .errors import InvalidConfigError
from .frames import SAMPLE_RATE, Channels, SampleFormat, iter_chunks
from .params import SfxParams

_LOGGER = logging.getLogger("retrosfx.audio")

_SUBTYPES: Mapping[SampleFormat, str] = MappingProxyType({"int16": "PCM_16", "float": "FLOAT"})


def _as_frames(samples: NDArray[Any], channels: int) -> NDArray[Any]:
    if channels not in (1, 2):
        raise InvalidConfigError(f"channels must be 1 or 2, got {channels}")
    flat = np.asarray(samples).reshape(-1)
    if flat.size % channels:
        raise InvalidConfigError("interleaved sample count is not a multiple of channels")
    if channels == 1:
        return flat
    return flat.reshape(-1, channels)


def _subtype(samples: NDArray[Any]) -> str:
    match np.asarray(samples).dtype:
        case np.int16:
            return "PCM_16"
        case np.float32:
            return "FLOAT"
        case dtype:
            raise InvalidConfigError(f"Unsupported sample dtype for wav export: {dtype}")


def write_wav(
    path: str | Path,
    samples: NDArray[Any],
    *,
    channels: Channels = 1,
    sample_rate: int = SAMPLE_RATE,
) -> Path:
    """Write interleaved int16 (16-bit PCM) or float32 frames to a wav file."""

    target = Path(path)
    frames = _as_frames(samples, channels)
    subtype = _subtype(frames)
    sf.write(target, frames, sample_rate, subtype=subtype)  # type: ignore[reportUnknownMemberType]
    return target


def write_wav_chunks(
    path: str | Path,
    chunks: Iterable[NDArray[Any]],
    *,
    channels: Channels = 1,
    sample_rate: int = SAMPLE_RATE,
    sample_format: SampleFormat = "int16",
) -> int:
    """Stream interleaved chunks into a wav file; return frames written.

    int16 chunks become 16-bit PCM, float chunks 32-bit float.
    """

    target = Path(path)
    total = 0
    with sf.SoundFile(
        target,
        mode="w",
        samplerate=sample_rate,
        channels=channels,
        subtype=_SUBTYPES[sample_format],
    ) as handle:
        for chunk in chunks:
            frames = _as_frames(chunk, channels)
            handle.write(frames)  # type: ignore[reportUnknownMemberType]
            total += len(frames)
    return total


def export_wav(
    params: SfxParams,
    path: str | Path,
    *,
    seed: int | None = None,
    channels: Channels = 1,
    sample_format: SampleFormat = "int16",
    chunk_frames: int = 1024,
    max_frames: int | None = None,
) -> int:
    """Render one full note of ``params`` to a 44.1 kHz wav file."""

    if sample_format not in _SUBTYPES:
        raise InvalidConfigError(f"Unsupported sample format: {sample_format!r}")
    decoder = Decoder().start(params, QUICK_SEED if seed is None else seed)
    chunks = iter_chunks(
        decoder,
        chunk_frames,
        channels=channels,
        sample_format=sample_format,
        max_frames=max_frames,
    )
    frames = write_wav_chunks(path, chunks, channels=channels, sample_format=sample_format)
    _LOGGER.info("Exported %d %s frames to %s", frames, sample_format, path)
    return frames
