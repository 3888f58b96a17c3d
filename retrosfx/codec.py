"""Versioned binary load/save of :class:`SfxParams`.

The layout is the classic sfxr settings file: little-endian int32/float32
fields, no magic number and no checksum. Versions 100, 101 and 102 are read;
102 is always written. Byte transport is delegated to caller-supplied
callbacks that are invoked once per byte; the first failure aborts the
operation.

Neither :func:`load` nor :func:`save` raises on I/O or format problems. They
return a result object carrying the error instead, and callers decide
whether to retry, report or ignore it.
"""

from __future__ import annotations

import io
import logging
import struct
from pathlib import Path
from typing import BinaryIO, Callable

from pydantic import BaseModel, ConfigDict

from .errors import (
    ByteIOError,
    CodecError,
    InvalidConfigError,
    InvalidParamsError,
    UnsupportedVersionError,
)
from .params import SfxParams, default_params, wave_from_id

_LOGGER = logging.getLogger("retrosfx.codec")

ByteReader = Callable[[], tuple[int, bool]]
ByteWriter = Callable[[int], bool]

SUPPORTED_VERSIONS: frozenset[int] = frozenset({100, 101, 102})
CURRENT_VERSION = 102

_INT32 = struct.Struct("<i")
_FLOAT32 = struct.Struct("<f")


class LoadResult(BaseModel):
    params: SfxParams | None = None
    version: int | None = None
    error: CodecError | None = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> SfxParams:
        if self.error is not None:
            raise self.error
        assert self.params is not None
        return self.params


class SaveResult(BaseModel):
    bytes_written: int = 0
    error: CodecError | None = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> int:
        if self.error is not None:
            raise self.error
        return self.bytes_written


class _Abort(Exception):
    """Internal signal: a byte callback failed."""


class _FieldReader:
    def __init__(self, reader: ByteReader) -> None:
        self._reader = reader
        self.count = 0

    def byte(self) -> int:
        value, ok = self._reader()
        if not ok:
            raise _Abort(f"byte reader failed at offset {self.count}")
        self.count += 1
        return value & 0xFF

    def raw(self, size: int) -> bytes:
        return bytes(self.byte() for _ in range(size))

    def int32(self) -> int:
        return _INT32.unpack(self.raw(4))[0]

    def float32(self) -> float:
        return _FLOAT32.unpack(self.raw(4))[0]


class _FieldWriter:
    def __init__(self, writer: ByteWriter) -> None:
        self._writer = writer
        self.count = 0

    def byte(self, value: int) -> None:
        if not self._writer(value & 0xFF):
            raise _Abort(f"byte writer failed at offset {self.count}")
        self.count += 1

    def raw(self, data: bytes) -> None:
        for value in data:
            self.byte(value)

    def int32(self, value: int) -> None:
        self.raw(_INT32.pack(value))

    def float32(self, value: float) -> None:
        self.raw(_FLOAT32.pack(value))


def _read_fields(fields: _FieldReader) -> tuple[SfxParams | None, int, CodecError | None]:
    version = fields.int32()
    if version not in SUPPORTED_VERSIONS:
        return None, version, UnsupportedVersionError(version)

    try:
        wave_type = wave_from_id(fields.int32())
    except InvalidConfigError as exc:
        return None, version, InvalidParamsError(str(exc))

    params = default_params()
    params.wave_type = wave_type

    if version >= 102:
        params.sound_vol = fields.float32()

    params.base_freq = fields.float32()
    params.freq_limit = fields.float32()
    params.freq_ramp = fields.float32()
    if version >= 101:
        params.freq_dramp = fields.float32()
    params.duty = fields.float32()
    params.duty_ramp = fields.float32()

    params.vib_strength = fields.float32()
    params.vib_speed = fields.float32()
    fields.float32()  # vib_delay, reserved

    params.env_attack = fields.float32()
    params.env_sustain = fields.float32()
    params.env_decay = fields.float32()
    params.env_punch = fields.float32()

    fields.byte()  # filter_on, reserved

    params.lpf_resonance = fields.float32()
    params.lpf_freq = fields.float32()
    params.lpf_ramp = fields.float32()
    params.hpf_freq = fields.float32()
    params.hpf_ramp = fields.float32()

    params.pha_offset = fields.float32()
    params.pha_ramp = fields.float32()

    params.repeat_speed = fields.float32()

    if version >= 101:
        params.arp_speed = fields.float32()
        params.arp_mod = fields.float32()

    return params, version, None


def load(reader: ByteReader) -> LoadResult:
    """Decode one parameter set, pulling bytes from ``reader``."""

    fields = _FieldReader(reader)
    try:
        params, version, error = _read_fields(fields)
    except _Abort as exc:
        _LOGGER.warning("sfxr load aborted: %s", exc)
        return LoadResult(error=ByteIOError(str(exc)))

    if error is not None:
        _LOGGER.warning("sfxr load rejected: %s", error)
        return LoadResult(version=version, error=error)
    return LoadResult(params=params, version=version)


def save(params: SfxParams, writer: ByteWriter) -> SaveResult:
    """Encode ``params`` as a version 102 stream, pushing bytes to ``writer``."""

    fields = _FieldWriter(writer)
    try:
        fields.int32(CURRENT_VERSION)
        fields.int32(params.wave_id)
        fields.float32(params.sound_vol)

        fields.float32(params.base_freq)
        fields.float32(params.freq_limit)
        fields.float32(params.freq_ramp)
        fields.float32(params.freq_dramp)
        fields.float32(params.duty)
        fields.float32(params.duty_ramp)

        fields.float32(params.vib_strength)
        fields.float32(params.vib_speed)
        fields.float32(0.0)  # vib_delay

        fields.float32(params.env_attack)
        fields.float32(params.env_sustain)
        fields.float32(params.env_decay)
        fields.float32(params.env_punch)

        fields.byte(0)  # filter_on

        fields.float32(params.lpf_resonance)
        fields.float32(params.lpf_freq)
        fields.float32(params.lpf_ramp)
        fields.float32(params.hpf_freq)
        fields.float32(params.hpf_ramp)

        fields.float32(params.pha_offset)
        fields.float32(params.pha_ramp)

        fields.float32(params.repeat_speed)

        fields.float32(params.arp_speed)
        fields.float32(params.arp_mod)
    except _Abort as exc:
        _LOGGER.warning("sfxr save aborted: %s", exc)
        return SaveResult(bytes_written=fields.count, error=ByteIOError(str(exc)))

    return SaveResult(bytes_written=fields.count)


def stream_reader(fp: BinaryIO) -> ByteReader:
    """Adapt a binary file object to the byte reader contract."""

    def _read() -> tuple[int, bool]:
        try:
            chunk = fp.read(1)
        except OSError as exc:
            _LOGGER.info("read failed: %s", exc, exc_info=True)
            return 0, False
        if not chunk:
            return 0, False
        return chunk[0], True

    return _read


def stream_writer(fp: BinaryIO) -> ByteWriter:
    """Adapt a binary file object to the byte writer contract."""

    def _write(value: int) -> bool:
        try:
            return fp.write(bytes((value,))) == 1
        except OSError as exc:
            _LOGGER.info("write failed: %s", exc, exc_info=True)
            return False

    return _write


def loads(data: bytes) -> LoadResult:
    return load(stream_reader(io.BytesIO(data)))


def dumps(params: SfxParams) -> bytes:
    buffer = io.BytesIO()
    save(params, stream_writer(buffer)).unwrap()
    return buffer.getvalue()


def load_file(path: str | Path) -> LoadResult:
    target = Path(path)
    try:
        with target.open("rb") as handle:
            return load(stream_reader(handle))
    except OSError as exc:
        _LOGGER.warning("Could not open %s: %s", target, exc)
        return LoadResult(error=ByteIOError(f"{target}: {exc}"))


def save_file(params: SfxParams, path: str | Path) -> SaveResult:
    target = Path(path)
    try:
        with target.open("wb") as handle:
            return save(params, stream_writer(handle))
    except OSError as exc:
        _LOGGER.warning("Could not write %s: %s", target, exc)
        return SaveResult(error=ByteIOError(f"{target}: {exc}"))
