from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Optional

from .errors import RedeclaredVariable

if TYPE_CHECKING:
    from .runtime import PPInstance, Session, Value

ScopeDict = dict[str, "Value"]


@dataclass
class Ctx:
    """
    Contexto de execução.

    Guarda o escopo atual (nomes das variáveis e seus valores), o escopo pai,
    o receptor implícito (``^``) do método em execução e a sessão do programa
    (registro de classes e saída).
    """

    scope: ScopeDict = field(default_factory=dict)
    parent: Optional["Ctx"] = None
    receiver: Optional["PPInstance"] = None
    session: Optional["Session"] = None

    @classmethod
    def from_dict(cls, env: ScopeDict, session: Optional["Session"] = None) -> "Ctx":
        """
        Cria um novo contexto raiz a partir de um dicionário.
        """
        return cls(dict(env), None, None, session)

    def __getitem__(self, key):
        """Busca uma variável no escopo atual ou nos escopos pais"""
        try:
            return self.scope[key]
        except KeyError:
            if self.parent is not None:
                return self.parent[key]
            raise KeyError(key)

    def var_def(self, key, value=None, position=None):
        """
        Define uma nova variável no escopo atual.

        Declarar de novo um nome do mesmo escopo é erro; nomes de escopos pais
        podem ser sombreados.
        """
        if key in self.scope:
            raise RedeclaredVariable(f"Variable '{key}' is already declared in this scope.", position)
        self.scope[key] = value

    def iter_scopes(self, reverse: bool = False) -> Iterator[ScopeDict]:
        """
        Itera sobre os ambientes do contexto, começando pelo mais interno.
        """
        if reverse:
            if self.parent is not None:
                yield from self.parent.iter_scopes(reverse=True)
            yield self.scope
        else:
            yield self.scope
            if self.parent is not None:
                yield from self.parent.iter_scopes()

    def pretty(self) -> str:
        """
        Representação do contexto como string.
        """
        lines: list[str] = []
        for i, scope in enumerate(self.iter_scopes(reverse=True)):
            lines.append(pretty_scope(scope, i))
        return "\n".join(reversed(lines))

    def push(self, scope=None) -> "Ctx":
        """Cria um novo contexto com um novo escopo, tendo o contexto atual como pai"""
        return Ctx(scope or {}, self, self.receiver, self.session)

    def enter_method(self, receiver: "PPInstance", scope: ScopeDict) -> "Ctx":
        """
        Contexto para o corpo de um método: só enxerga os próprios parâmetros
        e o receptor, nunca o escopo de quem chamou.
        """
        return Ctx(scope, None, receiver, self.session)


def pretty_scope(env: ScopeDict, index: int) -> str:
    """
    Representa um escopo como string.
    """
    from .runtime import show_repr

    if not env:
        return f"{index:>2}: <empty>"
    items = (f"{k} = {show_repr(v)}" for k, v in sorted(env.items()))
    data = "; ".join(items)
    return f"{index:>2}: {data}"
