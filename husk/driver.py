import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional
from .lexer import Lexer
from .parser import Parser
from .lower import Lowerer
from .diagnostics import ErrorReporter
from .errors import HuskError
from .recognizers import LexerConfig, DEFAULT_CONFIG
from .ir import Module, format_module
from . import ast as A

logger = logging.getLogger(__name__)


def compile_source(source: str, filename: str = "", color: bool = False,
                   config: LexerConfig = DEFAULT_CONFIG) -> Module:
    """Run lex -> parse -> lower; the first HuskError aborts the compile."""
    tokens = Lexer(source, filename, config, color).tokenize()
    program = Parser(tokens, source, filename, color).parse()
    return Lowerer(ErrorReporter(source, filename, color)).lower(program)


def _use_color(no_color: bool) -> bool:
    if no_color or os.environ.get("NO_COLOR"):
        return False
    return sys.stderr.isatty()


def main(argv: Optional[list] = None) -> int:
    ap = argparse.ArgumentParser(prog="husk", description="husk compiler")
    ap.add_argument("source", type=Path, help="Source file")
    ap.add_argument("-o", "--out", type=Path, default=None, help="Output file (default: build/out.<ext>)")
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--emit", choices=("tokens", "ast", "ir", "llvm"), default="llvm", help="What to write")
    mode.add_argument("--run", action="store_true", help="Execute main with the reference VM instead of writing output")
    ap.add_argument("--no-color", action="store_true", help="Disable ANSI colors in diagnostics")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log pipeline progress")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(name)s: %(message)s")
    color = _use_color(args.no_color)
    filename = str(args.source)

    try:
        src_text = args.source.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        print(f"Cannot read {args.source}: not valid UTF-8 (byte offset {e.start})", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Cannot read {args.source}: {e.strerror or e}", file=sys.stderr)
        return 1

    try:
        if args.emit == "tokens":
            tokens = Lexer(src_text, filename, color=color).tokenize()
            output = "\n".join(repr(t) for t in tokens) + "\n"
        elif args.emit == "ast":
            tokens = Lexer(src_text, filename, color=color).tokenize()
            output = A.dump(Parser(tokens, src_text, filename, color).parse()) + "\n"
        else:
            module = compile_source(src_text, filename, color)
            if args.run:
                from husk_runtime.vm import HuskVM, VMError
                try:
                    exit_code = HuskVM(module).run_main()
                except VMError as e:
                    print(f"Runtime error: {e}", file=sys.stderr)
                    return 1
                return exit_code & 0xFF
            if args.emit == "ir":
                output = format_module(module)
            else:
                from .codegen_llvm import emit_llvm
                output = emit_llvm(module)
    except HuskError as e:
        logger.debug("%s at %s", e.kind.name, e.location or "<no location>")
        print(e.rendered, file=sys.stderr)
        return 1

    ext = {"tokens": "tokens", "ast": "ast", "ir": "ir", "llvm": "ll"}[args.emit]
    out = args.out if args.out is not None else Path("build") / f"out.{ext}"
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(output, encoding="utf-8")
    logger.debug("wrote %d bytes", len(output))
    print(f"Wrote {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
