"""
Erros da linguagem ++.

Todo erro produzido pelo núcleo é uma subclasse de PPError e carrega um tipo
(kind), uma mensagem e, quando disponível, a posição no código fonte. O
núcleo apenas lança os erros; quem decide como reportá-los é o hospedeiro.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Position:
    """
    Posição no código fonte. Linha e coluna começam em 1.
    """

    line: int
    column: int
    offset: int = 0

    def __str__(self):
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Diagnostic:
    """
    Representação estruturada de um erro, entregue ao hospedeiro.
    """

    kind: str
    message: str
    position: Optional[Position] = None

    def __str__(self):
        if self.position is None:
            return f"{self.kind}: {self.message}"
        return f"{self.position}: {self.kind}: {self.message}"


class PPError(Exception):
    """
    Classe base para todos os erros da linguagem ++.
    """

    kind = "Error"

    def __init__(self, message: str, position: Optional[Position] = None):
        self.message = message
        self.position = position
        super().__init__(message)

    def __str__(self):
        return str(self.diagnostic())

    def diagnostic(self) -> Diagnostic:
        return Diagnostic(self.kind, self.message, self.position)


class LexError(PPError):
    """
    Caractere não reconhecido, string ou comentário sem fechamento.
    """

    kind = "LexError"


class ParseError(PPError):
    """
    Violação da gramática: token inesperado ou fim prematuro da entrada.
    """

    kind = "SyntaxError"

    def __init__(self, message, position=None, expected=()):
        super().__init__(message, position)
        self.expected = frozenset(expected)


class SemanticError(ParseError):
    """
    Erro detectado na validação estática da árvore sintática.
    """

    kind = "SemanticError"

    def __init__(self, message, position=None, token=None):
        if token is not None:
            message = f"Error at '{token}': {message}"
        super().__init__(message, position)
        self.token = token


#
# ERROS DE EXECUÇÃO
#
class PPRuntimeError(PPError):
    """
    Erro durante a avaliação do programa. Sempre interrompe a execução.
    """

    kind = "RuntimeError"


class UnknownClass(PPRuntimeError):
    """Instanciação de uma classe que não foi declarada."""

    kind = "UnknownClass"


class UnknownMethod(PPRuntimeError):
    """Chamada de um método que não existe na classe do receptor."""

    kind = "UnknownMethod"


class UnknownFunction(PPRuntimeError):
    """Chamada de uma função embutida que não existe."""

    kind = "UnknownFunction"


class UndefinedVariable(PPRuntimeError):
    """Leitura de um nome que não existe em nenhum escopo."""

    kind = "UndefinedVariable"


class UnsetField(PPRuntimeError):
    """Leitura de um campo que nunca foi atribuído."""

    kind = "UnsetField"


class RedeclaredVariable(PPRuntimeError):
    """Declaração repetida do mesmo nome no mesmo escopo."""

    kind = "RedeclaredVariable"


class DuplicateClass(PPRuntimeError):
    """Registro repetido de uma classe com o mesmo nome."""

    kind = "DuplicateClass"


class ArityError(PPRuntimeError):
    """Mais argumentos do que parâmetros."""

    kind = "ArityError"


class TypeMismatch(PPRuntimeError):
    """Operação aplicada a um valor de tipo inadequado."""

    kind = "TypeMismatch"


class StackOverflow(PPRuntimeError):
    """Recursão profunda demais."""

    kind = "StackOverflow"
