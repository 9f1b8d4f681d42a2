# shadergen/__main__.py
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import pygame

from shadergen.config import WindowSettings
from shadergen.errors import (
    BundleParseError,
    DeviceUnavailableError,
    PipelineError,
    PipelineSources,
)
from shadergen.host import Window
from shadergen.runtime import RenderSession

logger = logging.getLogger("shadergen")

EXIT_OK = 0
EXIT_BAD_INPUT = 1
EXIT_NO_DEVICE = 2


def read_bundle(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def format_failure(
    error: PipelineError, sources: Optional[PipelineSources]
) -> str:
    """Error text plus whatever source text is available for inspection."""
    lines = [f"Error ({error.stage_name}): {error}"]

    if isinstance(error, BundleParseError):
        lines += ["", "--- raw bundle ---", error.raw_text]
    elif sources is not None:
        lines += ["", "--- raw bundle ---", sources.raw]
        if sources.normalized_fragment:
            lines += [
                "",
                "--- normalized fragment shader ---",
                sources.normalized_fragment,
            ]
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    defaults = WindowSettings()
    parser = argparse.ArgumentParser(
        prog="shadergen",
        description="Render a generated vertex/fragment shader bundle.",
    )
    parser.add_argument("bundle", help="bundle file, or '-' to read stdin")
    parser.add_argument("--width", type=int, default=defaults.width)
    parser.add_argument("--height", type=int, default=defaults.height)
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        bundle = read_bundle(args.bundle)
    except OSError as e:
        logger.error("Could not read bundle %s: %s", args.bundle, e)
        return EXIT_BAD_INPUT

    try:
        window = Window(WindowSettings(width=args.width, height=args.height))
    except DeviceUnavailableError as e:
        logger.error("%s", e)
        return EXIT_NO_DEVICE

    session = RenderSession(window.device)

    def load(text: str) -> None:
        try:
            session.start_render(text)
        except DeviceUnavailableError:
            raise
        except PipelineError as e:
            # The previous frame stays on screen.
            print(format_failure(e, session.sources), file=sys.stderr)

    def reload() -> None:
        try:
            text = read_bundle(args.bundle)
        except OSError as e:
            logger.error("Could not reload %s: %s", args.bundle, e)
            return
        logger.info("Reloading %s", args.bundle)
        load(text)

    if args.bundle != "-":
        window.on_key(pygame.K_r, reload)

    try:
        load(bundle)
        window.run()
    except DeviceUnavailableError as e:
        logger.error("%s", e)
        return EXIT_NO_DEVICE
    finally:
        session.stop_render()
        window.destroy()

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
