"""
Analisador léxico da linguagem ++.

Converte o texto fonte numa sequência preguiçosa de tokens. Espaços em branco
e comentários (``// linha`` e ``/* bloco */``) servem apenas para separar
tokens e nunca aparecem na saída.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from .errors import LexError, Position

__all__ = ["KEYWORDS", "SYMBOLS", "Lexer", "Token", "TokenKind", "tokenize"]


class TokenKind(Enum):
    IDENTIFIER = "identifier"
    NUMBER = "number"
    STRING = "string"
    SYMBOL = "symbol"
    KEYWORD = "keyword"
    EOF = "end-of-input"


@dataclass(frozen=True)
class Token:
    """
    Um token produzido pelo lexer.
    """

    kind: TokenKind
    text: str
    pos: Position

    def __str__(self):
        if self.kind is TokenKind.EOF:
            return "end of input"
        return repr(self.text)


KEYWORDS = frozenset({"constructor"})

# Símbolos com vários caracteres vêm antes dos simples para garantir o casamento
# mais longo.
SYMBOLS = ("$$", "^.", "{", "}", "(", ")", "[", "]", ".", ",", ";", ":", "?", "!", "=", "@", "#", "^")

TOKEN_SPEC = [
    ("NEWLINE", r"\n"),
    ("WS", r"[ \t\r\f\v]+"),
    ("LINE_COMMENT", r"//[^\n]*"),
    ("BLOCK_COMMENT", r"/\*(?s:.*?)\*/"),
    ("UNCLOSED_COMMENT", r"/\*"),
    ("NUMBER", r"\d+(?:\.\d+)?"),
    ("STRING", r'"(?:[^"\\\n]|\\.)*"'),
    ("UNCLOSED_STRING", r'"'),
    ("IDENT", r"[A-Za-z_][A-Za-z0-9_]*"),
    ("SYMBOL", "|".join(re.escape(sym) for sym in SYMBOLS)),
    ("MISMATCH", r"."),
]
TOKEN_REGEX = re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in TOKEN_SPEC))

ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


def tokenize(source: str) -> Iterator[Token]:
    """
    Gera os tokens de source sob demanda, terminando com um token EOF.
    """
    line = 1
    line_start = 0

    for m in TOKEN_REGEX.finditer(source):
        kind = m.lastgroup
        text = m.group()
        pos = Position(line, m.start() - line_start + 1, m.start())

        if kind == "NEWLINE":
            line += 1
            line_start = m.end()
        elif kind == "BLOCK_COMMENT":
            newlines = text.count("\n")
            if newlines:
                line += newlines
                line_start = m.start() + text.rindex("\n") + 1
        elif kind in ("WS", "LINE_COMMENT"):
            continue
        elif kind == "UNCLOSED_COMMENT":
            raise LexError("Unterminated block comment.", pos)
        elif kind == "UNCLOSED_STRING":
            raise LexError("Unterminated string.", pos)
        elif kind == "MISMATCH":
            raise LexError(f"Unexpected character {text!r}.", pos)
        elif kind == "NUMBER":
            if math.isinf(float(text)):
                raise LexError("Number literal is too large.", pos)
            yield Token(TokenKind.NUMBER, text, pos)
        elif kind == "STRING":
            yield Token(TokenKind.STRING, text, pos)
        elif kind == "IDENT":
            token_kind = TokenKind.KEYWORD if text in KEYWORDS else TokenKind.IDENTIFIER
            yield Token(token_kind, text, pos)
        else:
            yield Token(TokenKind.SYMBOL, text, pos)

    yield Token(TokenKind.EOF, "", Position(line, len(source) - line_start + 1, len(source)))


def unescape(literal: str) -> str:
    """
    Converte o texto de um token STRING (com aspas) no valor da string.
    """
    return re.sub(r"\\(.)", lambda m: ESCAPES.get(m.group(1), m.group(1)), literal[1:-1])


def escape(value: str) -> str:
    """
    Operação inversa de unescape: produz o literal com aspas.
    """
    text = value.replace("\\", "\\\\").replace('"', '\\"')
    text = text.replace("\n", "\\n").replace("\t", "\\t")
    return f'"{text}"'


class Lexer:
    """
    Sequência de tokens de um texto fonte.

    Cada iteração recomeça a análise do início, de modo que o mesmo Lexer
    pode ser percorrido várias vezes produzindo sempre os mesmos tokens.
    """

    def __init__(self, source: str):
        self.source = source

    def __iter__(self) -> Iterator[Token]:
        return tokenize(self.source)

    def __repr__(self):
        return f"Lexer({self.source!r})"
