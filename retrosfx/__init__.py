from __future__ import annotations

from .codec import (
    ByteReader,
    ByteWriter,
    LoadResult,
    SaveResult,
    dumps,
    load,
    load_file,
    loads,
    save,
    save_file,
    stream_reader,
    stream_writer,
)
from .config import RenderSettings
from .decoder import QUICK_SEED, Decoder, start, start_quick
from .errors import (
    ByteIOError,
    CodecError,
    InvalidConfigError,
    InvalidParamsError,
    RetroSfxError,
    UnsupportedVersionError,
)
from .frames import (
    FRAME_BYTES,
    SAMPLE_RATE,
    iter_chunks,
    produce_mono_float,
    produce_mono_int16,
    produce_stereo_float,
    produce_stereo_int16,
    render,
)
from .generate import PRESETS, Preset, generate, mutate
from .params import WAVE_TYPES, SfxParams, WaveType, clamp, default_params
from .prng import Prng

__all__ = [
    "FRAME_BYTES",
    "PRESETS",
    "QUICK_SEED",
    "SAMPLE_RATE",
    "WAVE_TYPES",
    "ByteIOError",
    "ByteReader",
    "ByteWriter",
    "CodecError",
    "Decoder",
    "InvalidConfigError",
    "InvalidParamsError",
    "LoadResult",
    "Preset",
    "Prng",
    "RenderSettings",
    "RetroSfxError",
    "SaveResult",
    "SfxParams",
    "UnsupportedVersionError",
    "WaveType",
    "clamp",
    "default_params",
    "dumps",
    "generate",
    "iter_chunks",
    "load",
    "load_file",
    "loads",
    "mutate",
    "produce_mono_float",
    "produce_mono_int16",
    "produce_stereo_float",
    "produce_stereo_int16",
    "render",
    "save",
    "save_file",
    "start",
    "start_quick",
    "stream_reader",
    "stream_writer",
]
