from __future__ import annotations


class RetroSfxError(Exception):
    """Base error for the retrosfx library."""


class InvalidConfigError(RetroSfxError):
    """Raised when a preset, label or setting cannot be parsed or validated."""


class CodecError(RetroSfxError):
    """Base error for binary load/save failures."""


class ByteIOError(CodecError):
    """A caller-supplied byte reader or writer reported a failure."""


class UnsupportedVersionError(CodecError):
    """The stream carries a version tag other than 100, 101 or 102."""

    def __init__(self, version: int) -> None:
        super().__init__(f"Unsupported sfxr version: {version}")
        self.version = version


class InvalidParamsError(CodecError):
    """The stream decoded to values the parameter model cannot hold."""
