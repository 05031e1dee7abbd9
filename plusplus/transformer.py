"""
Implementa o transformador da árvore sintática que converte entre as representações

    lark.Tree -> plusplus.ast.Node.

Nomes (terminal NAME) chegam como lark.Token e carregam a posição no código
fonte, que é repassada aos nós.
"""

from lark import Token, Transformer, v_args

from .ast import *
from .errors import Position
from .lexer import unescape


def position(token: Token) -> Position:
    return Position(token.line, token.column, token.start_pos)


@v_args(inline=True)
class PPTransformer(Transformer):
    # Programa
    def program(self, *stmts):
        return Program(list(stmts))

    # Classes
    def class_def(self, name: Token, *members):
        return ClassDeclaration(str(name), list(members), pos=position(name))

    def ctor_def(self, token: Token, params: list[str], body: Body):
        return ConstructorDeclaration(params, body, pos=position(token))

    def method_def(self, name: Token, params: list[str], body: Body):
        return MethodDeclaration(str(name), params, body, pos=position(name))

    def params(self, *names: Token) -> list[str]:
        return [str(name) for name in names]

    def body(self, *stmts: Stmt) -> Body:
        return list(stmts)

    # Comandos
    def var_def(self, name: Token, value: Expr):
        return VariableDeclaration(str(name), value, pos=position(name))

    def field_assign(self, name: Token, value: Expr):
        return FieldAssignment(str(name), value, pos=position(name))

    def if_cmd(self, cond: Expr, then: Body, orelse: Body = None):
        # Sem o ramo "senão", usamos um corpo vazio
        if orelse is None:
            orelse = []
        return Conditional(cond, then, orelse, pos=cond.pos)

    def for_cmd(self, item: Token, iterable: Expr, body: Body):
        return ForEach(str(item), iterable, body, pos=position(item))

    def expr_stmt(self, expr: Expr):
        return ExpressionStatement(expr, pos=expr.pos)

    # Expressões
    def method_call(self, receiver: Expr, name: Token, args: list[Expr]):
        return MethodCall(receiver, str(name), args, pos=position(name))

    def self_call(self, name: Token, args: list[Expr]):
        return MethodCall(Receiver(pos=position(name)), str(name), args, pos=position(name))

    def args(self, *exprs: Expr) -> list[Expr]:
        return list(exprs)

    def new(self, name: Token, args: list[Expr]):
        return Instantiation(str(name), args, pos=position(name))

    def call(self, name: Token, args: list[Expr]):
        return Call(str(name), args, pos=position(name))

    def array(self, items: list[Expr]):
        return ArrayLiteral(items)

    def self_getattr(self, name: Token):
        return SelfFieldAccess(str(name), pos=position(name))

    def receiver(self, token: Token):
        return Receiver(pos=position(token))

    def var(self, name: Token):
        return Identifier(str(name), pos=position(name))

    def NUMBER(self, token: Token) -> Literal:
        return Literal(float(token), pos=position(token))

    def STRING(self, token: Token) -> Literal:
        return Literal(unescape(str(token)), pos=position(token))
