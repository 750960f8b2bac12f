"""Command-line interface for rendering and checking diagram text."""

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from . import __version__
from .config import DiagramConfig
from .generator import DiagramGenerator
from .text import FixedWidthMeasurer

logger = logging.getLogger(__name__)


@dataclass
class CliError(Exception):
    message: str
    hint: Optional[str] = None
    exit_code: int = 1


class UsageError(Exception):
    pass


class FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # pragma: no cover - argparse callback
        raise UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = FriendlyArgumentParser(
        prog="boxflow",
        description="Render box-and-connector diagrams from plain text.",
    )
    parser.add_argument("--version", action="version", version=f"boxflow {__version__}")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command")

    render_parser = subparsers.add_parser("render", help="Render diagram text to PNG")
    render_parser.add_argument("input", help="Input diagram file ('-' for stdin)")
    render_parser.add_argument("-o", "--output", help="Output .png path")
    render_parser.add_argument("--scale", type=float, default=2.0)
    render_parser.add_argument("--font-size", type=int, help="Font size in pixels")
    render_parser.add_argument("--font-path", help="TrueType font file")
    render_parser.add_argument(
        "--strict", action="store_true", help="Exit with 1 if the diagram has errors"
    )
    render_parser.add_argument(
        "--trace", metavar="FILE", help="Write a render trace dump to FILE"
    )

    check_parser = subparsers.add_parser(
        "check", help="Report parse errors and unresolved relations"
    )
    check_parser.add_argument("input", help="Input diagram file ('-' for stdin)")
    check_parser.add_argument(
        "--strict", action="store_true", help="Exit with 1 if the diagram has errors"
    )

    return parser


def _read_input(path: str) -> str:
    logger.debug("Reading diagram from %s", "stdin" if path == "-" else path)
    if path == "-":
        return sys.stdin.read()
    input_path = Path(path)
    try:
        return input_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CliError(f"failed to read input file: {input_path}", hint=str(exc))


def _config_from_args(args: argparse.Namespace) -> DiagramConfig:
    overrides = {}
    if getattr(args, "font_size", None):
        overrides["font_size"] = args.font_size
    if getattr(args, "font_path", None):
        overrides["font_path"] = args.font_path
    return DiagramConfig().with_overrides(**overrides)


def _report(dropped) -> None:
    # Parse errors are already logged by the generator
    for record in dropped:
        sys.stderr.write(
            f"warning: relation not drawn: "
            f"{record.start_label} {record.arrow_token} {record.end_label}\n"
        )


def _handle_render(args: argparse.Namespace) -> int:
    if args.scale <= 0:
        raise CliError(
            "--scale must be > 0",
            hint="Use a positive scale factor like 1 or 2.",
            exit_code=2,
        )
    text = _read_input(args.input)
    if args.output:
        output_path = Path(args.output)
    elif args.input != "-":
        output_path = Path(args.input).with_suffix(".png")
    else:
        raise CliError("--output is required when reading stdin", exit_code=2)

    generator = DiagramGenerator(_config_from_args(args))
    try:
        diagram = generator.save_png(
            text, str(output_path), scale=args.scale, debug=bool(args.trace)
        )
    except OSError as exc:
        raise CliError(f"failed to write output file: {output_path}", hint=str(exc))

    if args.trace:
        generator.get_trace().dump_to_file(args.trace)

    _report(diagram.dropped)
    print(f"Wrote {output_path}")
    if args.strict and diagram.has_errors:
        return 1
    return 0


def _handle_check(args: argparse.Namespace) -> int:
    text = _read_input(args.input)
    # Geometry is not needed, only which relations resolve
    generator = DiagramGenerator(measurer=FixedWidthMeasurer())
    diagram = generator.generate(text)
    _report(diagram.dropped)
    if not diagram.errors and not diagram.dropped:
        print("ok")
    if args.strict and diagram.has_errors:
        return 1
    return 0


def _emit_error(err: CliError) -> None:
    sys.stderr.write(f"error: {err.message}\n")
    if err.hint:
        sys.stderr.write(f"hint: {err.hint}\n")


def main(argv: Optional[Iterable[str]] = None) -> int:
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    parser = _build_parser()

    try:
        args = parser.parse_args(raw_argv)
    except UsageError as exc:
        _emit_error(CliError(str(exc), hint="Use subcommands: render, check.", exit_code=2))
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "render":
            return _handle_render(args)
        if args.command == "check":
            return _handle_check(args)
        raise CliError(
            "missing subcommand", hint="Use one of: render, check.", exit_code=2
        )
    except CliError as err:
        _emit_error(err)
        return err.exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
