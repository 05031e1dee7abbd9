from abc import ABC
from dataclasses import dataclass, field
from typing import Optional, Union

from .ctx import Ctx
from .errors import (
    PPRuntimeError,
    SemanticError,
    StackOverflow,
    TypeMismatch,
    UndefinedVariable,
    UnknownFunction,
)
from .lexer import escape
from . import runtime

# Declaramos nossa classe base num módulo separado para esconder um pouco de
# Python relativamente avançado de quem não se interessar pelo assunto.
#
# A classe Node implementa um método `pretty` que imprime as árvores de forma
# legível. Também possui funcionalidades para navegar na árvore usando cursores
# e métodos de visitação.
from .node import Cursor, Node

INDENT = "    "


class Expr(Node, ABC):
    """
    Classe base para expressões.

    Expressões são nós que podem ser avaliados para produzir um valor.
    """

    def source(self) -> str:
        """
        Código fonte canônico da expressão.
        """
        raise NotImplementedError


class Stmt(Node, ABC):
    """
    Classe base para comandos.

    Comandos são associados a construtos sintáticos que alteram o fluxo de
    execução do código ou declaram elementos como classes e variáveis.
    """

    def source(self, indent: int = 0) -> str:
        """
        Código fonte canônico do comando, indentado com `indent` níveis.
        """
        raise NotImplementedError


Body = list[Stmt]


def block_source(stmts: Body, indent: int) -> str:
    if not stmts:
        return "{}"
    lines = [stmt.source(indent + 1) for stmt in stmts]
    return "{\n" + "\n".join(lines) + "\n" + INDENT * indent + "}"


def args_source(args: list[Expr]) -> str:
    return ", ".join(arg.source() for arg in args)


def run_body(stmts: Body, ctx: Ctx):
    for stmt in stmts:
        stmt.eval(ctx)


def current_receiver(ctx: Ctx, node: Node) -> "runtime.PPInstance":
    if ctx.receiver is None:
        raise PPRuntimeError("Can't use '^' outside of a class.", node.pos)
    return ctx.receiver


def check_inside_member(cursor: Cursor):
    """Valida que `^` só aparece dentro de métodos e construtores"""
    for node in cursor.parents():
        if isinstance(node, (MethodDeclaration, ConstructorDeclaration)):
            return
    raise SemanticError("Can't use '^' outside of a class.", cursor.node.pos, token="^")


def check_params(params: list[str], cursor: Cursor):
    """Valida que não há parâmetros repetidos"""
    seen = set()
    for param in params:
        if param in seen:
            raise SemanticError("Duplicate parameter.", cursor.node.pos, token=param)
        seen.add(param)


@dataclass
class Program(Node):
    """
    Representa um programa.

    Um programa é uma lista de declarações de classe e comandos.
    """

    stmts: list[Stmt]

    def validate_self(self, cursor: Cursor):
        """Valida que cada classe é declarada uma única vez"""
        declared = set()
        for stmt in self.stmts:
            if isinstance(stmt, ClassDeclaration):
                if stmt.name in declared:
                    raise SemanticError("Class is already declared.", stmt.pos, token=stmt.name)
                declared.add(stmt.name)

    def source(self) -> str:
        return "\n".join(stmt.source(0) for stmt in self.stmts) + "\n"

    def eval(self, ctx: Ctx):
        """
        Registra todas as classes e depois executa os comandos em ordem.

        Retorna o valor do último comando de expressão, ou void.
        """
        for stmt in self.stmts:
            if isinstance(stmt, ClassDeclaration):
                stmt.eval(ctx)

        result = None
        try:
            for stmt in self.stmts:
                if isinstance(stmt, ClassDeclaration):
                    continue
                value = stmt.eval(ctx)
                if isinstance(stmt, ExpressionStatement):
                    result = value
        except RecursionError as e:
            raise StackOverflow("Maximum recursion depth exceeded.") from e
        return result


#
# EXPRESSÕES
#
@dataclass
class Literal(Expr):
    """
    Representa valores literais no código: números e strings.

    Ex.: 42, 3.14, "Hello, world!"
    """

    value: Union[float, str]

    def source(self) -> str:
        if isinstance(self.value, str):
            return escape(self.value)
        return runtime.format_number(self.value)

    def eval(self, ctx: Ctx):
        return self.value


@dataclass
class Identifier(Expr):
    """
    Uma variável no código.

    Ex.: x, children
    """

    name: str

    def source(self) -> str:
        return self.name

    def eval(self, ctx: Ctx):
        try:
            return ctx[self.name]
        except KeyError:
            raise UndefinedVariable(f"Undefined variable '{self.name}'.", self.pos)


@dataclass
class Receiver(Expr):
    """
    O receptor implícito do método em execução.

    Ex.: ^
    """

    def validate_self(self, cursor: Cursor):
        check_inside_member(cursor)

    def source(self) -> str:
        return "^"

    def eval(self, ctx: Ctx):
        return current_receiver(ctx, self)


@dataclass
class SelfFieldAccess(Expr):
    """
    Leitura de um campo do receptor.

    Ex.: ^.children
    """

    name: str

    def validate_self(self, cursor: Cursor):
        check_inside_member(cursor)

    def source(self) -> str:
        return f"^.{self.name}"

    def eval(self, ctx: Ctx):
        return current_receiver(ctx, self).get(self.name, self.pos)


@dataclass
class ArrayLiteral(Expr):
    """
    Um array, com os elementos avaliados da esquerda para a direita.

    Ex.: [1, "dois", #Tree(3)]
    """

    items: list[Expr]

    def source(self) -> str:
        return f"[{args_source(self.items)}]"

    def eval(self, ctx: Ctx):
        return [item.eval(ctx) for item in self.items]


@dataclass
class Instantiation(Expr):
    """
    Criação de uma instância.

    Ex.: #Tree(1, [])
    """

    class_name: str
    args: list[Expr]

    def source(self) -> str:
        return f"#{self.class_name}({args_source(self.args)})"

    def eval(self, ctx: Ctx):
        args = tuple(arg.eval(ctx) for arg in self.args)
        pp_class = ctx.session.classes.lookup(self.class_name, self.pos)
        return pp_class.instantiate(ctx, args, self.pos)


@dataclass
class MethodCall(Expr):
    """
    Chamada de método.

    Ex.: tree.print_all()
    """

    receiver: Expr
    name: str
    args: list[Expr]

    def source(self) -> str:
        return f"{self.receiver.source()}.{self.name}({args_source(self.args)})"

    def eval(self, ctx: Ctx):
        obj = self.receiver.eval(ctx)
        if not isinstance(obj, runtime.PPInstance):
            msg = f"Only instances have methods, got {runtime.show_repr(obj)}."
            raise TypeMismatch(msg, self.pos)
        method = obj.pp_class.get_method(self.name, self.pos)
        args = tuple(arg.eval(ctx) for arg in self.args)
        return method.invoke(ctx, obj, args, self.pos)


@dataclass
class Call(Expr):
    """
    Chamada de uma função embutida.

    Ex.: print(^.value)
    """

    name: str
    args: list[Expr]

    def source(self) -> str:
        return f"{self.name}({args_source(self.args)})"

    def eval(self, ctx: Ctx):
        try:
            func = runtime.BUILTINS[self.name]
        except KeyError:
            raise UnknownFunction(f"Undefined function '{self.name}'.", self.pos)
        args = tuple(arg.eval(ctx) for arg in self.args)
        return func(ctx, args, self.pos)


#
# COMANDOS
#
@dataclass
class ExpressionStatement(Stmt):
    """
    Uma expressão usada como comando.

    Ex.: tree.print_all();
    """

    expr: Expr

    def source(self, indent: int = 0) -> str:
        return f"{INDENT * indent}{self.expr.source()};"

    def eval(self, ctx: Ctx):
        return self.expr.eval(ctx)


@dataclass
class VariableDeclaration(Stmt):
    """
    Representa uma declaração de variável.

    Ex.: $$tree = #Tree(1);
    """

    name: str
    value: Expr

    def source(self, indent: int = 0) -> str:
        return f"{INDENT * indent}$${self.name} = {self.value.source()};"

    def eval(self, ctx: Ctx):
        value = self.value.eval(ctx)
        ctx.var_def(self.name, value, self.pos)


@dataclass
class FieldAssignment(Stmt):
    """
    Atribuição de um campo do receptor. Cria o campo se necessário.

    Ex.: ^.value = value;
    """

    name: str
    value: Expr

    def validate_self(self, cursor: Cursor):
        check_inside_member(cursor)

    def source(self, indent: int = 0) -> str:
        return f"{INDENT * indent}^.{self.name} = {self.value.source()};"

    def eval(self, ctx: Ctx):
        receiver = current_receiver(ctx, self)
        receiver.set(self.name, self.value.eval(ctx))


@dataclass
class Conditional(Stmt):
    """
    Representa um comando condicional. Sem o ramo "senão", orelse fica vazio.

    Ex.: (children)? { ... }: { ... }
    """

    cond: Expr
    then: Body
    orelse: Body = field(default_factory=list)

    def source(self, indent: int = 0) -> str:
        text = f"{INDENT * indent}({self.cond.source()})? {block_source(self.then, indent)}"
        if self.orelse:
            text += f": {block_source(self.orelse, indent)}"
        return text

    def eval(self, ctx: Ctx):
        cond = self.cond.eval(ctx)
        branch = self.then if runtime.truthy(cond) else self.orelse
        run_body(branch, ctx.push())


@dataclass
class ForEach(Stmt):
    """
    Percorre um array, ligando cada elemento a uma variável nova por iteração.

    Ex.: (child : ^.children)! { child.print_all(); }
    """

    item: str
    iterable: Expr
    body: Body

    def source(self, indent: int = 0) -> str:
        head = f"({self.item} : {self.iterable.source()})!"
        return f"{INDENT * indent}{head} {block_source(self.body, indent)}"

    def eval(self, ctx: Ctx):
        values = self.iterable.eval(ctx)
        if not isinstance(values, list):
            msg = f"Can only iterate over arrays, got {runtime.show_repr(values)}."
            raise TypeMismatch(msg, self.pos)
        for value in values:
            run_body(self.body, ctx.push({self.item: value}))


@dataclass
class MethodDeclaration(Stmt):
    """
    Representa um método dentro de uma classe.

    Ex.: print_all() { ... }
    """

    name: str
    params: list[str]
    body: Body

    def validate_self(self, cursor: Cursor):
        check_params(self.params, cursor)

    def source(self, indent: int = 0) -> str:
        params = ", ".join(self.params)
        return f"{INDENT * indent}{self.name}({params}) {block_source(self.body, indent)}"

    def to_method(self) -> "runtime.Method":
        return runtime.Method(self.name, self.params, self.body)


@dataclass
class ConstructorDeclaration(Stmt):
    """
    Representa o construtor de uma classe.

    Ex.: constructor(value, children) { ... }
    """

    params: list[str]
    body: Body

    def validate_self(self, cursor: Cursor):
        check_params(self.params, cursor)

    def source(self, indent: int = 0) -> str:
        params = ", ".join(self.params)
        return f"{INDENT * indent}constructor({params}) {block_source(self.body, indent)}"

    def to_method(self) -> "runtime.Method":
        return runtime.Method("constructor", self.params, self.body)


Member = Union[MethodDeclaration, ConstructorDeclaration]


@dataclass
class ClassDeclaration(Stmt):
    """
    Representa uma classe.

    Ex.: @ Tree { constructor(value) { ... } print_all() { ... } }
    """

    name: str
    members: list[Member]

    def validate_self(self, cursor: Cursor):
        """Valida que não há métodos repetidos nem mais de um construtor"""
        seen = set()
        constructor: Optional[ConstructorDeclaration] = None
        for member in self.members:
            if isinstance(member, ConstructorDeclaration):
                if constructor is not None:
                    raise SemanticError("A class can have only one constructor.", member.pos, token="constructor")
                constructor = member
            elif member.name in seen:
                raise SemanticError("Method is already declared in this class.", member.pos, token=member.name)
            else:
                seen.add(member.name)

    def source(self, indent: int = 0) -> str:
        if not self.members:
            return f"{INDENT * indent}@ {self.name} {{}}"
        members = "\n".join(member.source(indent + 1) for member in self.members)
        return f"{INDENT * indent}@ {self.name} {{\n{members}\n{INDENT * indent}}}"

    def to_class(self) -> "runtime.PPClass":
        methods = {}
        constructor = None
        for member in self.members:
            if isinstance(member, ConstructorDeclaration):
                constructor = member.to_method()
            else:
                methods[member.name] = member.to_method()
        return runtime.PPClass(self.name, methods, constructor)

    def eval(self, ctx: Ctx):
        pp_class = self.to_class()
        ctx.session.classes.register(pp_class, self.pos)
        return pp_class
