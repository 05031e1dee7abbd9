import builtins
from decimal import Decimal
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional, Union

from .ctx import Ctx
from .errors import (
    ArityError,
    DuplicateClass,
    Position,
    UnknownClass,
    UnknownMethod,
    UnsetField,
)
from .lexer import escape

if TYPE_CHECKING:
    from .ast import Stmt

__all__ = [
    "BUILTINS",
    "Builtin",
    "ClassRegistry",
    "Method",
    "PPClass",
    "PPInstance",
    "Session",
    "Value",
    "format_number",
    "show",
    "show_repr",
    "truthy",
]


@dataclass
class Method:
    """
    Um método ou construtor declarado numa classe.
    """

    name: str
    params: list[str]
    body: list["Stmt"]

    def __str__(self):
        return f"<method {self.name}>"

    def bind_args(self, args: tuple, position: Optional[Position] = None) -> dict[str, "Value"]:
        """
        Associa cada parâmetro ao argumento correspondente.

        Parâmetros sem argumento ficam com void; argumentos sobrando são erro.
        """
        if len(args) > len(self.params):
            msg = f"'{self.name}' expected at most {len(self.params)} arguments but got {len(args)}."
            raise ArityError(msg, position)
        scope = dict.fromkeys(self.params)
        scope.update(zip(self.params, args))
        return scope

    def invoke(self, ctx: Ctx, receiver: "PPInstance", args: tuple, position: Optional[Position] = None):
        """
        Executa o corpo do método com o receptor ligado. Sempre retorna void.
        """
        env = ctx.enter_method(receiver, self.bind_args(args, position))
        for stmt in self.body:
            stmt.eval(env)
        return None


@dataclass(frozen=True)
class PPClass:
    """
    Uma classe declarada com ``@ Nome { ... }``.

    Imutável depois de criada. Não há herança: a busca de métodos é feita
    numa única tabela.
    """

    name: str
    methods: dict[str, Method] = field(default_factory=dict)
    constructor: Optional[Method] = None

    def __str__(self):
        return f"<class {self.name}>"

    def get_method(self, name: str, position: Optional[Position] = None) -> Method:
        try:
            return self.methods[name]
        except KeyError:
            raise UnknownMethod(f"Undefined method '{name}' on class '{self.name}'.", position)

    def instantiate(self, ctx: Ctx, args: tuple, position: Optional[Position] = None) -> "PPInstance":
        """
        Cria uma nova instância e executa o construtor, se houver.
        """
        instance = PPInstance(self)
        if self.constructor is not None:
            self.constructor.invoke(ctx, instance, args, position)
        elif args:
            raise ArityError(f"'{self.name}' has no constructor but got {len(args)} arguments.", position)
        return instance


class PPInstance:
    """
    Uma instância de PPClass com o seu mapa de campos.
    """

    def __init__(self, pp_class: PPClass):
        self.pp_class = pp_class
        self.fields: dict[str, "Value"] = {}

    def __str__(self):
        return f"<{self.pp_class.name} instance>"

    def __repr__(self):
        return f"PPInstance({self.pp_class.name}, {self.fields!r})"

    def get(self, name: str, position: Optional[Position] = None) -> "Value":
        """
        Lê um campo. Campos nunca atribuídos são erro.
        """
        try:
            return self.fields[name]
        except KeyError:
            raise UnsetField(f"Field '{name}' is not set on {self}.", position)

    def set(self, name: str, value: "Value"):
        """
        Define um campo da instância, criando-o se necessário.
        """
        self.fields[name] = value


class ClassRegistry:
    """
    Registro de classes de uma execução. Cada nome é registrado uma única vez.
    """

    def __init__(self):
        self._classes: dict[str, PPClass] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._classes

    def register(self, pp_class: PPClass, position: Optional[Position] = None):
        if pp_class.name in self:
            raise DuplicateClass(f"Class '{pp_class.name}' is already declared.", position)
        self._classes[pp_class.name] = pp_class

    def lookup(self, name: str, position: Optional[Position] = None) -> PPClass:
        try:
            return self._classes[name]
        except KeyError:
            raise UnknownClass(f"Undefined class '{name}'.", position)


@dataclass
class Session:
    """
    Estado de uma execução do programa: registro de classes e saída.

    A saída recebe uma string já formatada por chamada de ``print``; quem
    acrescenta a quebra de linha é ela.
    """

    output: Callable[[str], None] = builtins.print
    classes: ClassRegistry = field(default_factory=ClassRegistry)

    def new_ctx(self) -> Ctx:
        """
        Contexto raiz para executar um programa nesta sessão.
        """
        return Ctx.from_dict({}, self)


# Tipos de valores que podem aparecer durante a execução do programa
Value = Union[float, str, list, PPInstance, PPClass, None]


#
# FUNÇÕES EMBUTIDAS
#
def print(ctx: Ctx, value: "Value" = None):
    """
    Imprime um valor ++ na saída da sessão.
    """
    ctx.session.output(show(value))


@dataclass(frozen=True)
class Builtin:
    """
    Função embutida, chamada sem receptor: ``print(x)``.
    """

    name: str
    impl: Callable[..., "Value"]
    arity: int

    def __call__(self, ctx: Ctx, args: tuple, position: Optional[Position] = None) -> "Value":
        if len(args) > self.arity:
            msg = f"'{self.name}' expected at most {self.arity} arguments but got {len(args)}."
            raise ArityError(msg, position)
        return self.impl(ctx, *args)


BUILTINS: dict[str, Builtin] = {
    "print": Builtin("print", print, 1),
}


def show(value: "Value") -> str:
    """
    Converte valor ++ para string.
    """
    if value is None:
        return "void"
    elif isinstance(value, float):
        return format_number(value)
    elif isinstance(value, list):
        return "[" + ", ".join(show_repr(item) for item in value) + "]"
    else:
        return str(value)


def format_number(value: float) -> str:
    """
    Forma decimal canônica de um número: sem ".0" para inteiros e nunca em
    notação científica.
    """
    # Remove .0 se for um número inteiro
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def show_repr(value: "Value") -> str:
    """
    Mostra um valor ++, mas coloca aspas em strings.
    """
    if isinstance(value, str):
        return escape(value)
    return show(value)


def truthy(value: "Value") -> bool:
    """
    Converte valor ++ para booleano.

    Apenas void e o array vazio são falsos.
    """
    if value is None:
        return False
    if isinstance(value, list) and not value:
        return False
    return True
