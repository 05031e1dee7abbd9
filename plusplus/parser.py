"""
Analisador sintático da linguagem ++.

Usa o lark em modo LALR(1) sobre os tokens produzidos por plusplus.lexer. A
árvore do lark é convertida em plusplus.ast pelo PPTransformer e depois
validada estaticamente.
"""

import logging
from pathlib import Path

from lark import Lark, Token as LarkToken
from lark.exceptions import UnexpectedEOF, UnexpectedToken, VisitError
from lark.lexer import Lexer as LarkLexer

from .ast import Program
from .errors import ParseError, Position
from .lexer import Lexer, Token, TokenKind, tokenize
from .transformer import PPTransformer

__all__ = ["GRAMMAR_PATH", "parse", "terminal_name"]

log = logging.getLogger(__name__)

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

OPENERS = frozenset("([{")
CLOSERS = frozenset(")]}")

SYMBOL_TERMINALS = {
    "{": "_LBRACE",
    "}": "_RBRACE",
    "(": "_LPAR",
    ")": "_RPAR",
    "[": "_LSQB",
    "]": "_RSQB",
    ".": "_DOT",
    ",": "_COMMA",
    ";": "_SEMICOLON",
    ":": "_COLON",
    "?": "_QMARK",
    "!": "_BANG",
    "=": "_EQUAL",
    "@": "_AT",
    "#": "_HASH",
    "^": "CARET",
    "^.": "_CARET_DOT",
    "$$": "_DOLLARS",
}

# Nomes legíveis dos terminais, usados nas mensagens de erro
TERMINAL_DISPLAY = {
    **{terminal: f"'{symbol}'" for symbol, terminal in SYMBOL_TERMINALS.items()},
    "NAME": "identifier",
    "NUMBER": "number",
    "STRING": "string",
    "CONSTRUCTOR": "'constructor'",
    "$END": "end of input",
}


def terminal_name(token: Token) -> str:
    """
    Nome do terminal da gramática correspondente a um token do lexer.
    """
    if token.kind is TokenKind.IDENTIFIER:
        return "NAME"
    elif token.kind is TokenKind.KEYWORD:
        return token.text.upper()
    elif token.kind is TokenKind.SYMBOL:
        return SYMBOL_TERMINALS[token.text]
    return token.kind.name


class TokenStream(LarkLexer):
    """
    Adapta plusplus.lexer à interface de lexer customizado do lark.
    """

    def __init__(self, lexer_conf):
        pass

    def lex(self, data):
        # Versões recentes do lark entregam um TextSlice em vez de str
        text = getattr(data, "text", data)
        for token in tokenize(text):
            if token.kind is TokenKind.EOF:
                return
            pos = token.pos
            yield LarkToken(
                terminal_name(token),
                token.text,
                start_pos=pos.offset,
                line=pos.line,
                column=pos.column,
                end_line=pos.line,
                end_column=pos.column + len(token.text),
                end_pos=pos.offset + len(token.text),
            )


_PARSER = Lark(
    GRAMMAR_PATH.read_text(encoding="utf-8"),
    start="program",
    parser="lalr",
    lexer=TokenStream,
)


def describe(terminals) -> str:
    names = sorted(TERMINAL_DISPLAY.get(name, name) for name in terminals)
    return ", ".join(names)


def parse(src: str) -> Program:
    """
    Converte o código fonte em uma árvore sintática validada.

    Lança LexError, ParseError ou SemanticError.
    """
    try:
        tree = _PARSER.parse(src)
    except UnexpectedToken as e:
        if e.token.type == "$END":
            raise end_of_input_error(src, e.expected) from None
        position = Position(e.token.line, e.token.column, e.token.start_pos)
        found = TERMINAL_DISPLAY.get(e.token.type, repr(str(e.token)))
        if e.token.type == "NAME":
            found = f"identifier '{e.token}'"
        msg = f"Unexpected {found}. Expected one of: {describe(e.expected)}."
        raise ParseError(msg, position, e.expected) from None
    except UnexpectedEOF as e:
        raise end_of_input_error(src, e.expected) from None

    try:
        program = PPTransformer().transform(tree)
        program.validate_tree()
    except RecursionError:
        raise nesting_error(src) from None
    except VisitError as e:
        if isinstance(e.orig_exc, RecursionError):
            raise nesting_error(src) from None
        raise
    log.debug("parsed %d top-level statements", len(program.stmts))
    return program


def end_of_input_error(src: str, expected) -> ParseError:
    *_, eof = Lexer(src)
    msg = f"Unexpected end of input. Expected one of: {describe(expected)}."
    return ParseError(msg, eof.pos, expected)


def nesting_error(src: str) -> ParseError:
    """
    Erro para programas aninhados além do que a pilha do Python suporta.

    Aponta o primeiro delimitador aberto no nível mais profundo.
    """
    depth = deepest = 0
    position = None
    for token in tokenize(src):
        if token.kind is not TokenKind.SYMBOL:
            continue
        if token.text in OPENERS:
            depth += 1
            if depth > deepest:
                deepest, position = depth, token.pos
        elif token.text in CLOSERS:
            depth -= 1
    return ParseError(f"Nesting too deep ({deepest} levels).", position)
