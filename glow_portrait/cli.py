"""
Command line shell for rendering glow portraits.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import Background, DEFAULT_STYLE, load_style_parameters
from .errors import InvalidInput, InvalidParameter, RenderFailed
from .export import default_output_filename, write_png
from .logging_setup import configure_logging
from .rendering import GlowRenderer
from .sources import load_source_image


def render_command(args: argparse.Namespace, logger: logging.Logger) -> int:
    output_path = args.output or Path(default_output_filename())

    try:
        style = load_style_parameters(args.config).with_overrides(
            output_size=args.size,
            glow_radius=args.glow,
            intensity=args.intensity,
            cyanize=args.cyanize,
            contrast=args.contrast,
            saturation=args.saturation,
            vignette=args.vignette,
            particle_count=args.particles,
            lightning=args.lightning,
            background=args.background,
        )
        source = load_source_image(args.input) if args.input else None
        if source is None:
            logger.warning("No input image given; rendering background and effects only.")
        else:
            logger.info("Loaded %s (%sx%s)", args.input, source.width, source.height)

        surface = GlowRenderer(logger=logger).render(source, style)
        written = write_png(surface, output_path)
    except (InvalidParameter, InvalidInput) as exc:
        logger.error("Invalid input: %s", exc)
        return 2
    except RenderFailed as exc:
        logger.error("Render failed: %s", exc)
        return 1
    except OSError as exc:
        logger.error("File error while rendering %s: %s", output_path, exc)
        return 1

    logger.info("Wrote %s", written)
    return 0


def defaults_command(args: argparse.Namespace, logger: logging.Logger) -> int:
    try:
        style = load_style_parameters(args.config) if args.config else DEFAULT_STYLE
    except InvalidParameter as exc:
        logger.error("Invalid config: %s", exc)
        return 2
    except OSError as exc:
        logger.error("Failed to read %s: %s", args.config, exc)
        return 1
    print(json.dumps({"style": style.to_dict()}, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render a neon glow portrait from a single image.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging (per-layer timings).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write log output to this file.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser("render", help="Render an image to PNG.")
    render_parser.add_argument(
        "--input",
        "-i",
        type=Path,
        help="Source image. Without one only the background, particles and lightning are drawn.",
    )
    render_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output PNG path (default: spirit-pfp-<timestamp>.png).",
    )
    render_parser.add_argument(
        "--config",
        type=Path,
        help="JSON file with style parameters. Falls back to GLOW_* environment variables.",
    )
    render_parser.add_argument("--size", type=int, help="Output side length, 512-2048 in steps of 256.")
    render_parser.add_argument("--glow", type=int, help="Glow blur radius in pixels (0-60).")
    render_parser.add_argument("--intensity", type=float, help="Effect strength (0-1).")
    render_parser.add_argument("--cyanize", type=float, help="Cyan tint strength (0-1).")
    render_parser.add_argument("--contrast", type=float, help="Base image contrast (0.5-2).")
    render_parser.add_argument("--saturation", type=float, help="Base image saturation (0.2-2.5).")
    render_parser.add_argument("--vignette", type=float, help="Edge darkening (0-1).")
    render_parser.add_argument("--particles", type=int, help="Number of sparkles (0-600).")
    render_parser.add_argument(
        "--lightning",
        dest="lightning",
        action="store_const",
        const=True,
        help="Draw lightning arcs.",
    )
    render_parser.add_argument(
        "--no-lightning",
        dest="lightning",
        action="store_const",
        const=False,
        help="Skip lightning arcs.",
    )
    render_parser.add_argument(
        "--background",
        choices=[background.value for background in Background],
        help="Backdrop painted before the image layers.",
    )
    render_parser.set_defaults(lightning=None)

    defaults_parser = subparsers.add_parser(
        "defaults",
        help="Print the reset style parameters as JSON.",
    )
    defaults_parser.add_argument(
        "--config",
        type=Path,
        help="Show the parameters resolved from this JSON file instead.",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.INFO
    try:
        logger = configure_logging(level=level, log_file=args.log_file)
    except OSError as exc:
        logger = configure_logging(level=level)
        logger.warning("Cannot open log file %s, logging to stderr only: %s", args.log_file, exc)

    if args.command == "render":
        return render_command(args, logger)
    if args.command == "defaults":
        return defaults_command(args, logger)

    parser.error(f"Unhandled command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
