"""La Weá command-line entry point."""

from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from interpreter import Interpreter, LaWeaRuntimeError, TracebackFormatter
from lexer import LaWeaParseError
from source import SourceNotFound, decode_source


def run_cli(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="La Weá interpreter")
    parser.add_argument("program", help="Path to a La Weá source file (.lw)")
    args = parser.parse_args(argv)

    try:
        source = decode_source(args.program)
    except SourceNotFound as error:
        print(error, file=sys.stderr)
        return 1

    interpreter = Interpreter(source=source.text, filename=source.filename)
    try:
        interpreter.run()
    except LaWeaParseError as error:
        print(f"ParseError: {error}", file=sys.stderr)
        return 1
    except LaWeaRuntimeError as error:
        formatter = TracebackFormatter(interpreter)
        print(formatter.format_text(error), file=sys.stderr)
        return 1
    return 0


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
