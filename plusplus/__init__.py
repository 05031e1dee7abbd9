"""
Interpretador da linguagem ++.

    >>> from plusplus import run
    >>> run('print("Hello, world!");')
    Hello, world!
"""

import logging
from typing import Callable, Optional

from .ast import Program
from .ctx import Ctx
from .errors import (
    ArityError,
    Diagnostic,
    DuplicateClass,
    LexError,
    ParseError,
    Position,
    PPError,
    PPRuntimeError,
    RedeclaredVariable,
    SemanticError,
    StackOverflow,
    TypeMismatch,
    UndefinedVariable,
    UnknownClass,
    UnknownFunction,
    UnknownMethod,
    UnsetField,
)
from .lexer import Lexer, Token, TokenKind, tokenize
from .parser import parse
from .runtime import PPClass, PPInstance, Session, Value, show

__version__ = "0.1.0"

__all__ = [
    "ArityError",
    "Ctx",
    "Diagnostic",
    "DuplicateClass",
    "LexError",
    "Lexer",
    "PPClass",
    "PPError",
    "PPInstance",
    "PPRuntimeError",
    "ParseError",
    "Position",
    "Program",
    "RedeclaredVariable",
    "SemanticError",
    "Session",
    "StackOverflow",
    "Token",
    "TokenKind",
    "TypeMismatch",
    "UndefinedVariable",
    "UnknownClass",
    "UnknownFunction",
    "UnknownMethod",
    "UnsetField",
    "Value",
    "parse",
    "run",
    "show",
    "tokenize",
]

log = logging.getLogger(__name__)


def run(src: str, output: Optional[Callable[[str], None]] = None, session: Optional[Session] = None) -> Value:
    """
    Executa um programa ++ e retorna o valor do último comando de expressão.

    Cada `print` entrega uma linha já formatada para `output` (por padrão, a
    função print do Python). Uma sessão pode ser passada para reaproveitar o
    registro de classes entre execuções; um `output` dado junto com ela vale
    só para esta execução.
    """
    program = parse(src)
    if session is None:
        session = Session() if output is None else Session(output)
    log.debug("running program with %d top-level statements", len(program.stmts))
    if output is None:
        return program.eval(session.new_ctx())

    previous, session.output = session.output, output
    try:
        return program.eval(session.new_ctx())
    finally:
        session.output = previous
