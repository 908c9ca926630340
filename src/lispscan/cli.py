"""Command-line interface: dump the tokens of a Lisp source file."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lispscan.errors import ScanError
from lispscan.scanner import Scanner
from lispscan.tokens import (
    LISP_TOKENS,
    LISP_WHITESPACE,
    MODE_NAMES,
    RAW_DELIMITER,
    SKIP_COMMENTS,
    Token,
    token_string,
    whitespace_mask,
)

logger = logging.getLogger(__name__)

CONFIG_NAME = "lispscan.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path | None  # None reads stdin
    output_file: Path | None
    filename: str
    mode: int
    whitespace: int
    raw_delimiter: str
    verbose: bool


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Tokens and errors from scanning one input."""

    tokens: list[Token]
    errors: list[ScanError]
    source: str


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="lispscan",
        description="Tokenize Lisp source and print one token per line",
    )
    p.add_argument("input", help="Input file ('-' for stdin)")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument(
        "-d",
        "--disable",
        action="append",
        default=[],
        type=parse_mode_name,
        metavar="CLASS",
        help=f"Token class to disable (repeatable): {', '.join(MODE_NAMES)}",
    )
    p.add_argument(
        "--keep-comments",
        action="store_true",
        default=None,
        help="Report comments as tokens instead of skipping them",
    )
    p.add_argument("--raw-delimiter", metavar="CHAR", help="Raw string delimiter")
    p.add_argument("--filename", help="Filename reported in positions")
    p.add_argument("-v", "--verbose", action="store_true", help="Log a scan summary")
    return p


def parse_mode_name(s: str) -> str:
    """Validate a token class name."""
    if s not in MODE_NAMES:
        raise argparse.ArgumentTypeError(
            f"unknown token class: {s} (expected one of {', '.join(MODE_NAMES)})"
        )
    return s


def parse_delimiter(s: str) -> str:
    if len(s) != 1:
        raise argparse.ArgumentTypeError(f"raw delimiter must be one character: {s!r}")
    return s


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    input_file = None if args.input == "-" else Path(args.input)
    input_dir = input_file.parent if input_file is not None else Path(".")
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)
    cfg = config.get("scanner")
    if not isinstance(cfg, dict):
        cfg = {}

    # Disabled classes: config + CLI
    disabled: list[str] = []
    cfg_disable = cfg.get("disable")
    if isinstance(cfg_disable, list):
        disabled.extend(parse_mode_name(str(name)) for name in cfg_disable)
    disabled.extend(args.disable)

    mode = LISP_TOKENS
    for name in disabled:
        mode &= ~MODE_NAMES[name]

    # Comments: config < CLI
    keep_comments = bool(cfg.get("keep_comments", False))
    if args.keep_comments is not None:
        keep_comments = args.keep_comments
    if keep_comments:
        mode &= ~SKIP_COMMENTS

    whitespace = LISP_WHITESPACE
    cfg_ws = cfg.get("whitespace")
    if isinstance(cfg_ws, list):
        try:
            whitespace = whitespace_mask("".join(str(ch) for ch in cfg_ws))
        except ValueError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc

    # Raw delimiter: config < CLI
    raw_delimiter = RAW_DELIMITER
    if "raw_delimiter" in cfg:
        raw_delimiter = parse_delimiter(str(cfg["raw_delimiter"]))
    if args.raw_delimiter is not None:
        raw_delimiter = parse_delimiter(args.raw_delimiter)

    if args.filename is not None:
        filename = args.filename
    elif input_file is not None:
        filename = str(input_file)
    else:
        filename = "<stdin>"

    return CliOptions(
        input_file=input_file,
        output_file=Path(args.output) if args.output else None,
        filename=filename,
        mode=int(mode),
        whitespace=whitespace,
        raw_delimiter=raw_delimiter,
        verbose=args.verbose,
    )


def scan_file(options: CliOptions) -> ScanResult:
    """Read the input and scan it to the end, collecting errors."""
    if options.input_file is None:
        data = sys.stdin.buffer.read()
    else:
        data = options.input_file.read_bytes()

    errors: list[ScanError] = []
    scanner = Scanner(
        data,
        options.filename,
        mode=options.mode,
        whitespace=options.whitespace,
        raw_delimiter=options.raw_delimiter,
        error_handler=errors.append,
    )
    tokens = list(scanner)
    logger.info("%s: %d tokens, %d errors", options.filename, len(tokens), scanner.error_count)
    return ScanResult(tokens, errors, data.decode("utf-8", errors="replace"))


def format_token(token: Token) -> str:
    """One output line: position, token class, and quoted source text."""
    text = json.dumps(token.text, ensure_ascii=False)
    return f"{token.position}: ({token_string(token.type)}) {text}"


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.INFO if options.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    try:
        result = scan_file(options)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    output = "".join(format_token(tok) + "\n" for tok in result.tokens)
    if options.output_file:
        options.output_file.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)

    for err in result.errors:
        print(err.format(result.source), file=sys.stderr)

    return 1 if result.errors else 0
