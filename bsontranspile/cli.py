from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .backends import TARGETS
from .errors import TranspileError
from .transpiler import CompileOptions, Transpiler


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        prog="bsontranspile",
        description="bsontranspile: translate BSON-flavoured Python expressions into driver code",
    )
    ap.add_argument("source", type=Path, nargs="?", help="Source file (stdin when omitted)")
    ap.add_argument("-t", "--target", choices=TARGETS, required=True, help="Target language")
    ap.add_argument(
        "--no-idiomatic",
        dest="idiomatic",
        action="store_false",
        help="Render object literals as plain documents instead of query builders",
    )
    ap.add_argument("--imports", action="store_true", help="Print the import block after the generated code")
    ap.add_argument("--max-length", type=int, default=None, help="Reject sources longer than this many characters")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log compile progress to stderr")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    text = args.source.read_text() if args.source is not None else sys.stdin.read()
    transpiler = Transpiler(args.target, CompileOptions(idiomatic=args.idiomatic, max_source_length=args.max_length))
    try:
        code = transpiler.compile(text)
    except TranspileError as exc:
        print(f"error[{exc.code}]: {exc}", file=sys.stderr)
        return 1

    print(code)
    imports = transpiler.get_imports()
    if args.imports and imports:
        print()
        print(imports)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
