"""
Classe base dos nós da árvore sintática.

Fica num módulo separado para esconder um pouco de Python relativamente
avançado. A classe Node sabe listar seus filhos, imprimir a árvore de forma
legível e percorrer a árvore com cursores para validação.
"""

from dataclasses import dataclass, field, fields
from typing import Iterator, Optional

from .errors import Position


@dataclass
class Node:
    """
    Classe base para todos os nós da árvore sintática.

    Subclasses são dataclasses. Campos que guardam nós ou listas de nós são
    considerados filhos. A posição no código fonte não participa da
    comparação entre nós.
    """

    pos: Optional[Position] = field(default=None, compare=False, repr=False, kw_only=True)

    def children(self) -> Iterator["Node"]:
        """
        Itera sobre os filhos imediatos do nó, na ordem dos campos.
        """
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if isinstance(value, Node):
                yield value
            elif isinstance(value, (list, tuple)):
                yield from (item for item in value if isinstance(item, Node))

    def attrs(self) -> dict:
        """
        Campos comparáveis que não são filhos (nomes, valores literais, etc).
        """
        result = {}
        for f in fields(self):  # type: ignore[arg-type]
            if not f.compare:
                continue
            value = getattr(self, f.name)
            if isinstance(value, Node):
                continue
            if isinstance(value, (list, tuple)) and any(isinstance(v, Node) for v in value):
                continue
            result[f.name] = value
        return result

    def pretty(self, indent: int = 0) -> str:
        """
        Representação indentada da árvore, útil para depuração.
        """
        attrs = ", ".join(f"{k}={v!r}" for k, v in self.attrs().items())
        lines = [f"{'  ' * indent}{type(self).__name__}({attrs})"]
        for child in self.children():
            lines.append(child.pretty(indent + 1))
        return "\n".join(lines)

    def validate_self(self, cursor: "Cursor"):
        """
        Validação estática do nó. Subclasses lançam SemanticError.
        """

    def validate_tree(self):
        """
        Valida a árvore inteira, de cima para baixo.
        """
        Cursor(self).validate()


@dataclass
class Cursor:
    """
    Aponta para um nó e lembra o caminho até a raiz.
    """

    node: Node
    parent_cursor: Optional["Cursor"] = None

    def parents(self) -> Iterator[Node]:
        """
        Itera sobre os ancestrais do nó, do mais próximo para a raiz.
        """
        cursor = self.parent_cursor
        while cursor is not None:
            yield cursor.node
            cursor = cursor.parent_cursor

    def validate(self):
        self.node.validate_self(self)
        for child in self.node.children():
            Cursor(child, self).validate()
