from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import get_config
from .errors import UTF8CoercionError
from .normalize import candidate_encodings, coerce_utf8, ensure_utf8, suggest_encoding


def parse_encoding(value: str) -> str:
    try:
        candidate_encodings(value)
    except LookupError as exc:
        raise argparse.ArgumentTypeError(f"Unknown encoding: {value}") from exc
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="utf8-normalizer",
        description="Re-encode a file of uncertain encoding as UTF-8.",
    )
    parser.add_argument("input", help="Path to the input file, or - for stdin.")
    parser.add_argument(
        "-o",
        "--output",
        help="Where to write the UTF-8 result (default: stdout).",
    )
    parser.add_argument(
        "-e",
        "--encoding",
        type=parse_encoding,
        help="Preferred source encoding, tried before UTF-8 and Windows-1252.",
    )
    parser.add_argument(
        "--lossy",
        action="store_true",
        help="Escape undecodable bytes as 0xHH instead of failing.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors.",
    )
    return parser


def _read_input(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    input_path = Path(path).expanduser()
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    return input_path.read_bytes()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()

    log_level = logging.WARNING if args.quiet else config.log_level
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    raw = _read_input(args.input)

    if args.lossy:
        result = coerce_utf8(raw, args.encoding)
    else:
        try:
            result = ensure_utf8(raw, args.encoding)
        except UTF8CoercionError as exc:
            message = f"error: {exc}"
            suggested = suggest_encoding(raw) if config.suggest else None
            if suggested:
                message += f"; try --encoding {suggested} or --lossy"
            print(message, file=sys.stderr)
            return 1

    if args.output:
        output_path = Path(args.output).expanduser()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(bytes(result))
        logging.info("Wrote %d bytes of UTF-8 to %s", len(result), output_path)
    else:
        sys.stdout.buffer.write(bytes(result))
        sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
