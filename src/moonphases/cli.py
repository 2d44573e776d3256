"""CLI entry point: moonphases phase|svg|png|gif subcommands."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from moonphases.compute import classify_phase, generate_stars, illuminated_fraction
from moonphases.encoder import EncoderUnavailableError, EncodingError, GifEncoder
from moonphases.export import FrameSequencer
from moonphases.models import ExportSettings
from moonphases.renderers.static import ViewRenderer, save_static_views
from moonphases.renderers.svg_2d import export_svg, render_moon_svg, render_orbit_svg
from moonphases.state import AngleState

logger = logging.getLogger(__name__)

_STAR_SEED = 20240101


def _configure_logging(verbose: bool = False) -> None:
    """Configure logging for CLI (stderr, level from --verbose or MOONPHASES_LOG)."""
    level = logging.DEBUG if verbose else logging.INFO
    env_level = os.environ.get("MOONPHASES_LOG", "").upper()
    if env_level in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level = getattr(logging, env_level)
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def _phase_cmd(args: argparse.Namespace) -> int:
    phase = classify_phase(args.angle, args.lang)
    print(f"{phase.name} ({phase.type.value})")
    print(f"{illuminated_fraction(args.angle):.1%} lit")
    print(phase.caption)
    return 0


def _svg_cmd(args: argparse.Namespace) -> int:
    stars = generate_stars(seed=_STAR_SEED)
    out_dir: Path = args.output
    out_dir.mkdir(parents=True, exist_ok=True)
    for name, svg in (
        ("orbit-view.svg", render_orbit_svg(args.angle, stars, args.lang)),
        ("moon-view.svg", render_moon_svg(args.angle, stars, args.lang)),
    ):
        path = out_dir / name
        path.write_bytes(export_svg(svg))
        print(f"Saved: {path}")
    return 0


def _png_cmd(args: argparse.Namespace) -> int:
    for path in save_static_views(args.angle, args.output, generate_stars(seed=_STAR_SEED)):
        print(f"Saved: {path}")
    return 0


async def _export_gif(args: argparse.Namespace) -> Path:
    settings = ExportSettings()
    output: Path = args.output
    state = AngleState(args.angle)
    renderer = ViewRenderer(state, generate_stars(seed=_STAR_SEED))

    def deliver(data: bytes, filename: str) -> None:
        target = output / filename if output.is_dir() else output
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        print(f"Saved: {target}")

    sequencer = FrameSequencer(
        state,
        renderer,
        GifEncoder(settings.width, settings.height),
        deliver=deliver,
        lang=args.lang,
    )
    try:
        await sequencer.export(
            total_frames=args.frames,
            frame_delay_ms=args.delay,
            width=settings.width,
            height=settings.height,
        )
    finally:
        renderer.close()
    return output


def _gif_cmd(args: argparse.Namespace) -> int:
    try:
        asyncio.run(_export_gif(args))
    except (EncoderUnavailableError, EncodingError) as e:
        logger.error("GIF export failed: %s", e)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="moonphases",
        description="Moon phase geometry and exports.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--lang", choices=("en", "ja"), default="en", help="label language")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("phase", help="classify an orbital angle")
    p.add_argument("--angle", type=float, required=True, help="orbital angle (deg)")
    p.set_defaults(func=_phase_cmd)

    p = sub.add_parser("svg", help="write orbit-view.svg and moon-view.svg")
    p.add_argument("--angle", type=float, default=0.0, help="orbital angle (deg)")
    p.add_argument("-o", "--output", type=Path, default=Path("."), help="output directory")
    p.set_defaults(func=_svg_cmd)

    p = sub.add_parser("png", help="write both views as PNG")
    p.add_argument("--angle", type=float, default=0.0, help="orbital angle (deg)")
    p.add_argument("-o", "--output", type=Path, default=Path("."), help="output directory")
    p.set_defaults(func=_png_cmd)

    settings = ExportSettings()
    p = sub.add_parser("gif", help="write a full-rotation animated GIF")
    p.add_argument("--angle", type=float, default=0.0, help="angle to restore afterwards")
    p.add_argument("--frames", type=int, default=settings.total_frames, help="frame count")
    p.add_argument("--delay", type=int, default=settings.frame_delay_ms, help="ms per frame")
    p.add_argument(
        "-o", "--output", type=Path, default=Path(settings.filename),
        help="output file, or a directory to write moon-phases.gif into",
    )
    p.set_defaults(func=_gif_cmd)
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
