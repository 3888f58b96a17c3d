from pathlib import Path

import pytest
import soundfile as sf

from retrosfx.cli import main
from retrosfx.codec import load_file
from retrosfx.generate import generate


def test_generate_writes_default_name(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(["generate", "laser", "--seed", "17", "--mutations", "1"]) == 0

    saved = load_file(tmp_path / "laser_17.sfxr").unwrap()
    assert saved == generate("laser", 1, 17)


def test_generate_wave_override(tmp_path: Path) -> None:
    target = tmp_path / "saw.sfxr"
    argv = ["generate", "blip", "--seed", "0x10", "--wave", "saw", "--output", str(target)]
    assert main(argv) == 0
    assert load_file(target).unwrap().wave_type == "sawtooth"


def test_generate_rejects_negative_seed(capsys) -> None:
    with pytest.raises(SystemExit):
        main(["generate", "hit", "--seed", "-3"])
    assert "seed must be >= 0" in capsys.readouterr().err


def test_render_writes_wav(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("RETROSFX_MAX_SECONDS", "0.05")
    source = tmp_path / "coin.sfxr"
    assert main(["generate", "pickup", "--output", str(source)]) == 0

    assert main(["render", str(source), "--channels", "2", "--seed", "3"]) == 0
    data, rate = sf.read(tmp_path / "coin.wav", dtype="int16")
    assert rate == 44_100
    assert data.shape[1] == 2
    assert len(data) <= 2205


def test_info_lists_parameters(tmp_path: Path, capsys) -> None:
    source = tmp_path / "boom.sfxr"
    assert main(["generate", "explosion", "--output", str(source)]) == 0
    capsys.readouterr()

    assert main(["info", str(source)]) == 0
    out = capsys.readouterr().out
    assert "wave_type" in out
    assert "base_freq" in out


def test_code_prints_snippet(capsys) -> None:
    assert main(["code", "laser", "--seed", "17", "--mutations", "2"]) == 0
    out = capsys.readouterr().out
    assert "import retrosfx" in out
    assert "retrosfx.generate('laser', mutations=2, seed=17)" in out


def test_missing_input_returns_error(tmp_path: Path) -> None:
    assert main(["info", str(tmp_path / "missing.sfxr")]) == 1
    assert main(["render", str(tmp_path / "missing.sfxr")]) == 1


def test_unexpected_error_is_logged(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("RETROSFX_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("RETROSFX_CHANNELS", "7")
    source = tmp_path / "blip.sfxr"
    assert main(["generate", "blip", "--output", str(source)]) == 0

    assert main(["render", str(source)]) == 1
    assert "InvalidConfigError" in (tmp_path / "logs" / "retrosfx.log").read_text()


def test_render_honours_sample_format(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("RETROSFX_SAMPLE_FORMAT", "float")
    source = tmp_path / "blip.sfxr"
    assert main(["generate", "blip", "--output", str(source)]) == 0

    assert main(["render", str(source)]) == 0
    assert sf.info(tmp_path / "blip.wav").subtype == "FLOAT"

    pcm = tmp_path / "pcm.wav"
    assert main(["render", str(source), "--format", "int16", "--output", str(pcm)]) == 0
    assert sf.info(pcm).subtype == "PCM_16"
