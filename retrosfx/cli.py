from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Iterable, cast

from rich.console import Console
from rich.table import Table

from .audio import export_wav
from .codec import load_file, save_file
from .config import RenderSettings, preset_from_label, wave_from_label
from .frames import SAMPLE_RATE, Channels, SampleFormat
from .generate import PRESETS, generate, generation_snippet
from .logging_utils import configure_logging, log_exception
from .params import FLOAT_FIELDS, SfxParams, out_of_domain

_LOGGER = logging.getLogger("retrosfx.cli")
_CONSOLE = Console()
_ERR_CONSOLE = Console(stderr=True)


def _seed(value: str) -> int:
    # accepts decimal or 0x-prefixed seeds
    try:
        seed = int(value, 0)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid seed: {value!r}") from exc
    if seed < 0:
        raise argparse.ArgumentTypeError("seed must be >= 0")
    return seed


def _params_table(params: SfxParams, title: str) -> Table:
    offenders = set(out_of_domain(params))
    table = Table(title=title)
    table.add_column("parameter")
    table.add_column("value", justify="right")
    table.add_row("wave_type", params.wave_type)
    for name in FLOAT_FIELDS:
        value = f"{getattr(params, name):.6f}"
        if name in offenders:
            value = f"[red]{value}[/red]"
        table.add_row(name, value)
    return table


def _report(lines: Iterable[str]) -> None:
    for line in lines:
        _CONSOLE.print(line)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="retrosfx")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a sound from a preset and save it.")
    gen.add_argument("preset", choices=PRESETS, type=str)
    gen.add_argument("--seed", type=_seed, default=1)
    gen.add_argument("--mutations", type=int, default=0)
    gen.add_argument("--wave", type=str, default=None, help="Override the generated wave type.")
    gen.add_argument("--output", type=str, default=None)

    render = sub.add_parser("render", help="Render a saved sound to a wav file.")
    render.add_argument("input", type=str)
    render.add_argument("--output", type=str, default=None)
    render.add_argument("--seed", type=_seed, default=None)
    render.add_argument("--channels", type=int, choices=(1, 2), default=None)
    render.add_argument("--format", dest="sample_format", choices=("int16", "float"), default=None)

    info = sub.add_parser("info", help="Show the parameters of a saved sound.")
    info.add_argument("input", type=str)

    code = sub.add_parser("code", help="Print the call that regenerates a sound.")
    code.add_argument("preset", choices=PRESETS, type=str)
    code.add_argument("--seed", type=_seed, default=1)
    code.add_argument("--mutations", type=int, default=0)
    return parser


def _cmd_generate(args: argparse.Namespace) -> int:
    preset = preset_from_label(args.preset)
    params = generate(preset, args.mutations, args.seed)
    if args.wave is not None:
        params.wave_type = wave_from_label(args.wave)
    output = Path(args.output or f"{preset}_{args.seed}.sfxr")
    result = save_file(params, output)
    if not result.ok:
        _ERR_CONSOLE.print(f"[red]Could not save {output}: {result.error}[/red]")
        return 1
    _CONSOLE.print(f"Wrote {preset} sound to {output} ({result.bytes_written} bytes)")
    return 0


def _cmd_render(args: argparse.Namespace) -> int:
    loaded = load_file(args.input)
    if not loaded.ok:
        _ERR_CONSOLE.print(f"[red]Could not load {args.input}: {loaded.error}[/red]")
        return 1
    params = loaded.unwrap()

    settings = RenderSettings.from_env()
    seed = args.seed if args.seed is not None else settings.seed
    channels = cast(Channels, args.channels or settings.channels)
    sample_format = cast(SampleFormat, args.sample_format or settings.sample_format)
    output = Path(args.output or Path(args.input).with_suffix(".wav"))
    frames = export_wav(
        params,
        output,
        seed=seed,
        channels=channels,
        sample_format=sample_format,
        chunk_frames=settings.chunk_frames,
        max_frames=settings.max_frames,
    )
    seconds = frames / SAMPLE_RATE
    _CONSOLE.print(
        f"Wrote {frames} frames ({seconds:.3f}s, {channels}ch, {sample_format}) to {output}"
    )
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    loaded = load_file(args.input)
    if not loaded.ok:
        _ERR_CONSOLE.print(f"[red]Could not load {args.input}: {loaded.error}[/red]")
        return 1
    _CONSOLE.print(_params_table(loaded.unwrap(), f"{args.input} (version {loaded.version})"))
    return 0


def _cmd_code(args: argparse.Namespace) -> int:
    preset = preset_from_label(args.preset)
    _report(["import retrosfx", generation_snippet(preset, args.mutations, args.seed)])
    return 0


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    try:
        parser = build_parser()
        args = parser.parse_args(argv)

        if args.command == "generate":
            return _cmd_generate(args)
        if args.command == "render":
            return _cmd_render(args)
        if args.command == "info":
            return _cmd_info(args)
        if args.command == "code":
            return _cmd_code(args)

        parser.print_help()
        return 1
    except Exception as exc:
        debug = bool(os.environ.get("RETROSFX_DEBUG"))
        _LOGGER.warning("retrosfx CLI failed: %s", exc, exc_info=debug)
        log_exception("retrosfx CLI", exc)
        _ERR_CONSOLE.print(f"[red]retrosfx: {exc}[/red]")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
