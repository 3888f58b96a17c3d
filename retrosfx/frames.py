from __future__ import annotations

from collections.abc import Iterator
from types import MappingProxyType
from typing import Any, Literal, Mapping

import numpy as np
from numpy.typing import NDArray

from .decoder import QUICK_SEED, Decoder
from .errors import InvalidConfigError
from .params import SfxParams, to_f32

SAMPLE_RATE = 44_100

SampleFormat = Literal["int16", "float"]
Channels = Literal[1, 2]

Int16Array = NDArray[np.int16]
Float32Array = NDArray[np.float32]

# Bytes a caller must provide per requested frame.
FRAME_BYTES: Mapping[tuple[SampleFormat, int], int] = MappingProxyType(
    {
        ("int16", 1): 2,
        ("int16", 2): 4,
        ("float", 1): 4,
        ("float", 2): 8,
    }
)

_DTYPES: Mapping[SampleFormat, Any] = MappingProxyType({"int16": np.int16, "float": np.float32})


def _produce(
    decoder: Decoder,
    buffer: NDArray[Any],
    frames: int,
    channels: int,
    as_int16: bool,
) -> int:
    if not buffer.flags.c_contiguous:
        raise InvalidConfigError("frame buffer must be C-contiguous")
    capacity = min(max(frames, 0), buffer.size // channels)
    samples: list[float] = []
    for _ in range(capacity):
        value = decoder.produce()
        if not decoder.is_playing:
            break
        if as_int16:
            samples.append(int(to_f32(value * 32767.0)))
        else:
            samples.append(value)

    written = len(samples)
    if written == 0:
        return 0
    flat = buffer.reshape(-1)
    if channels == 1:
        flat[:written] = samples
    else:
        for channel in range(channels):
            flat[channel : written * channels : channels] = samples
    return written


def produce_mono_int16(decoder: Decoder, buffer: Int16Array, frames: int) -> int:
    """Write up to ``frames`` signed 16-bit mono frames; return the count written."""

    return _produce(decoder, buffer, frames, 1, True)


def produce_stereo_int16(decoder: Decoder, buffer: Int16Array, frames: int) -> int:
    """Write up to ``frames`` interleaved signed 16-bit stereo frames."""

    return _produce(decoder, buffer, frames, 2, True)


def produce_mono_float(decoder: Decoder, buffer: Float32Array, frames: int) -> int:
    return _produce(decoder, buffer, frames, 1, False)


def produce_stereo_float(decoder: Decoder, buffer: Float32Array, frames: int) -> int:
    return _produce(decoder, buffer, frames, 2, False)


def allocate(
    frames: int,
    *,
    channels: Channels = 1,
    sample_format: SampleFormat = "int16",
) -> NDArray[Any]:
    """A zeroed, flat, interleaved buffer with room for ``frames`` frames."""

    return np.zeros(frames * channels, dtype=_DTYPES[sample_format])


def produce(
    decoder: Decoder,
    buffer: NDArray[Any],
    frames: int,
    *,
    channels: Channels = 1,
    sample_format: SampleFormat = "int16",
) -> int:
    return _produce(decoder, buffer, frames, channels, sample_format == "int16")


def iter_chunks(
    decoder: Decoder,
    chunk_frames: int = 1024,
    *,
    channels: Channels = 1,
    sample_format: SampleFormat = "int16",
    max_frames: int | None = None,
) -> Iterator[NDArray[Any]]:
    """Yield fixed-size chunks until the note ends (or ``max_frames`` is reached).

    The final chunk is trimmed to the frames actually written.
    """

    remaining = max_frames
    while decoder.is_playing:
        request = chunk_frames if remaining is None else min(chunk_frames, remaining)
        if request <= 0:
            return
        buffer = allocate(request, channels=channels, sample_format=sample_format)
        written = produce(decoder, buffer, request, channels=channels, sample_format=sample_format)
        if written:
            yield buffer[: written * channels]
        if remaining is not None:
            remaining -= written
        if written < request:
            return


def render(
    params: SfxParams,
    *,
    seed: int | None = None,
    channels: Channels = 1,
    sample_format: SampleFormat = "int16",
    chunk_frames: int = 1024,
    max_frames: int | None = None,
) -> NDArray[Any]:
    """Play ``params`` from start to end and return every frame in one array."""

    decoder = Decoder().start(params, QUICK_SEED if seed is None else seed)
    chunks = list(
        iter_chunks(
            decoder,
            chunk_frames,
            channels=channels,
            sample_format=sample_format,
            max_frames=max_frames,
        )
    )
    if not chunks:
        return allocate(0, channels=channels, sample_format=sample_format)
    return np.concatenate(chunks)
