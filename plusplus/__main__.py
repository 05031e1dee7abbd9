"""
Hospedeiro de linha de comando: lê um arquivo .pp, executa e reporta erros.

    python -m plusplus exemplos/tree.pp
"""

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .errors import PPError
from .lexer import Lexer
from .parser import parse
from .runtime import Session

log = logging.getLogger("plusplus")


def build_argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plusplus",
        description="Interpreter for the ++ scripting language.",
    )
    parser.add_argument("source", type=Path, help="++ source file (.pp)")
    parser.add_argument("--check", action="store_true", help="Parse and validate only; do not execute.")
    parser.add_argument("--tokens", action="store_true", help="Print the token stream and exit.")
    parser.add_argument("--ast", action="store_true", help="Print the syntax tree and exit.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def format_diagnostic(path: Path, error: PPError) -> str:
    """
    Formata um erro como `arquivo:linha:coluna: Tipo: mensagem`.
    """
    diagnostic = error.diagnostic()
    if diagnostic.position is None:
        return f"{path}: {diagnostic}"
    return f"{path}:{diagnostic}"


def main(argv=None) -> int:
    args = build_argparser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[ %(levelname)s ] %(message)s",
        stream=sys.stderr,
    )

    log.info("Trying to open %s...", args.source)
    try:
        src = args.source.read_text(encoding="utf-8")
    except OSError as e:
        print(f"{args.source}: error: {e.strerror}", file=sys.stderr)
        return 1
    except UnicodeDecodeError:
        print(f"{args.source}: error: file is not valid UTF-8", file=sys.stderr)
        return 1

    try:
        if args.tokens:
            for token in Lexer(src):
                print(f"{token.pos}\t{token.kind.value}\t{token.text}")
            return 0

        program = parse(src)
        if args.ast:
            print(program.pretty())
            return 0
        if args.check:
            log.info("%s is valid.", args.source)
            return 0

        log.info("Running %s...", args.source)
        ctx = Session().new_ctx()
        program.eval(ctx)
        log.debug("global scope:\n%s", ctx.pretty())
    except PPError as e:
        print(format_diagnostic(args.source, e), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
