from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from retrosfx.audio import export_wav, write_wav
from retrosfx.errors import InvalidConfigError
from retrosfx.frames import SAMPLE_RATE, render
from retrosfx.generate import generate


def test_export_wav_writes_the_rendered_note(tmp_path: Path) -> None:
    params = generate("jump", 0, 5)
    target = tmp_path / "jump.wav"

    frames = export_wav(params, target, seed=5, chunk_frames=500)

    data, rate = sf.read(target, dtype="int16")
    assert rate == SAMPLE_RATE
    assert frames == len(data)
    assert np.array_equal(data, render(params, seed=5))


def test_export_wav_stereo_and_cap(tmp_path: Path) -> None:
    target = tmp_path / "capped.wav"
    frames = export_wav(generate("explosion", 0, 2), target, channels=2, max_frames=700)

    data, _ = sf.read(target, dtype="int16")
    assert frames == 700
    assert data.shape == (700, 2)


def test_write_wav_interleaved_stereo(tmp_path: Path) -> None:
    samples = np.array([100, -100, 200, -200, 300, -300], dtype=np.int16)
    target = write_wav(tmp_path / "pair.wav", samples, channels=2)

    data, _ = sf.read(target, dtype="int16")
    assert data.tolist() == [[100, -100], [200, -200], [300, -300]]


def test_write_wav_float(tmp_path: Path) -> None:
    samples = np.array([0.0, 0.25, -0.5], dtype=np.float32)
    target = write_wav(tmp_path / "float.wav", samples)

    info = sf.info(target)
    assert info.subtype == "FLOAT"
    assert info.frames == 3


def test_write_wav_rejects_other_dtypes(tmp_path: Path) -> None:
    with pytest.raises(InvalidConfigError):
        write_wav(tmp_path / "bad.wav", np.zeros(4, dtype=np.float64))


def test_write_wav_rejects_odd_stereo(tmp_path: Path) -> None:
    with pytest.raises(InvalidConfigError):
        write_wav(tmp_path / "odd.wav", np.zeros(3, dtype=np.int16), channels=2)


def test_export_wav_float(tmp_path: Path) -> None:
    params = generate("blip", 0, 4)
    target = tmp_path / "blip.wav"

    frames = export_wav(params, target, seed=4, sample_format="float")

    assert sf.info(target).subtype == "FLOAT"
    data, _ = sf.read(target, dtype="float32")
    assert frames == len(data)
    assert np.array_equal(data, render(params, seed=4, sample_format="float"))


def test_export_wav_rejects_unknown_format(tmp_path: Path) -> None:
    with pytest.raises(InvalidConfigError):
        export_wav(
            generate("blip", 0, 4),
            tmp_path / "x.wav",
            sample_format="int24",  # type: ignore[arg-type]
        )
