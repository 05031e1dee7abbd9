import pytest

from plusplus import parse
from plusplus.ast import (
    ArrayLiteral,
    ClassDeclaration,
    Conditional,
    ConstructorDeclaration,
    ExpressionStatement,
    FieldAssignment,
    ForEach,
    Identifier,
    Instantiation,
    Literal,
    MethodCall,
    MethodDeclaration,
    Receiver,
    SelfFieldAccess,
    VariableDeclaration,
)
from plusplus.errors import LexError, ParseError, Position, SemanticError


def test_parse_sample_program(tree_src):
    program = parse(tree_src)
    tree_class, declaration, call = program.stmts

    assert isinstance(tree_class, ClassDeclaration)
    assert tree_class.name == "Tree"
    constructor, print_all = tree_class.members
    assert constructor == ConstructorDeclaration(
        ["value", "children"],
        [
            FieldAssignment("value", Identifier("value")),
            FieldAssignment("children", Identifier("children")),
        ],
    )
    assert isinstance(print_all, MethodDeclaration)
    assert print_all.name == "print_all"
    assert print_all.params == []

    loop = print_all.body[1].then[0]
    assert loop == ForEach(
        "child",
        SelfFieldAccess("children"),
        [ExpressionStatement(MethodCall(Identifier("child"), "print_all", []))],
    )

    assert isinstance(declaration, VariableDeclaration)
    assert declaration.name == "tree"
    assert declaration.value.class_name == "Tree"
    assert call == ExpressionStatement(MethodCall(Identifier("tree"), "print_all", []))


def test_array_and_literals():
    program = parse('$$x = [1, "a", 2.5, []];')
    assert program.stmts == [
        VariableDeclaration(
            "x",
            ArrayLiteral([Literal(1.0), Literal("a"), Literal(2.5), ArrayLiteral([])]),
        )
    ]


def test_conditional_without_else_gets_empty_body():
    [stmt] = parse('(x)? { print(x); }').stmts
    assert isinstance(stmt, Conditional)
    assert stmt.cond == Identifier("x")
    assert len(stmt.then) == 1
    assert stmt.orelse == []


def test_method_calls_chain_left_to_right():
    [stmt] = parse("a.b().c(1);").stmts
    assert stmt.expr == MethodCall(
        MethodCall(Identifier("a"), "b", []),
        "c",
        [Literal(1.0)],
    )


def test_receiver_forms():
    program = parse("@ A { m() { ^.n(^); ^ .n(^.x); } }")
    first, second = program.stmts[0].members[0].body
    assert first.expr == MethodCall(Receiver(), "n", [Receiver()])
    assert second.expr == MethodCall(Receiver(), "n", [SelfFieldAccess("x")])


def test_nodes_carry_positions():
    [stmt] = parse("\n  #Nope(1);").stmts
    assert isinstance(stmt.expr, Instantiation)
    assert stmt.expr.pos == Position(2, 4, 4)


@pytest.mark.parametrize(
    "src",
    [
        "",
        "print(1);",
        '$$s = "aspas \\" e \\\\ barras\\n";',
        "$$n = 0.0000001;",
        "@ Empty {}",
        "@ A { constructor() {} m(a, b) { (a)? {}: { print(b); } } }",
        "(i : [1, [2, 3], #A()])! { (i)? { print(i); } }",
    ],
)
def test_source_round_trip(src):
    program = parse(src)
    assert parse(program.source()) == program


def test_source_round_trip_sample(tree_src):
    program = parse(tree_src)
    text = program.source()
    assert parse(text) == program
    assert parse(text).source() == text


def test_pretty():
    text = parse("@ A { m(x) { print(x); } }").pretty()
    assert text.splitlines()[0] == "Program()"
    assert "  ClassDeclaration(name='A')" in text
    assert "MethodDeclaration(name='m', params=['x'])" in text


def test_unexpected_token():
    with pytest.raises(ParseError) as exc:
        parse("$$x = ;")
    error = exc.value
    assert error.kind == "SyntaxError"
    assert error.position == Position(1, 7, 6)
    assert error.message.startswith("Unexpected ';'.")
    assert "NAME" in error.expected


def test_unexpected_end_of_input():
    with pytest.raises(ParseError) as exc:
        parse("tree.print_all()")
    assert exc.value.message.startswith("Unexpected end of input.")
    assert exc.value.position == Position(1, 17, 16)


def test_unmatched_brace():
    with pytest.raises(ParseError):
        parse("@ A { m() { print(1); }")


def test_class_declarations_only_at_top_level():
    with pytest.raises(ParseError):
        parse("(x)? { @ A {} }")


def test_lex_errors_propagate():
    with pytest.raises(LexError):
        parse("print(1) & print(2);")


def test_number_literal_out_of_range():
    with pytest.raises(LexError) as exc:
        parse("print(" + "9" * 400 + ");")
    assert exc.value.message == "Number literal is too large."
    assert exc.value.position == Position(1, 7, 6)


def test_large_number_literal_round_trips():
    program = parse("print(" + "9" * 300 + ");")
    assert "e" not in program.source()
    assert parse(program.source()) == program


def test_deep_nesting_is_a_parse_error():
    depth = 5000
    with pytest.raises(ParseError) as exc:
        parse("$$x = " + "[" * depth + "]" * depth + ";")
    assert exc.value.message == f"Nesting too deep ({depth} levels)."
    assert exc.value.position == Position(1, depth + 6, depth + 5)


def test_moderate_nesting_parses():
    program = parse("$$x = " + "[" * 50 + "]" * 50 + ";")
    assert program.source() == "$$x = " + "[" * 50 + "]" * 50 + ";\n"


@pytest.mark.parametrize(
    "src, message",
    [
        ("^.x = 1;", "Error at '^': Can't use '^' outside of a class."),
        ("print(^.x);", "Error at '^': Can't use '^' outside of a class."),
        ("print(^);", "Error at '^': Can't use '^' outside of a class."),
        ("@ A { m(a, a) {} }", "Error at 'a': Duplicate parameter."),
        ("@ A { constructor() {} constructor() {} }", "Error at 'constructor': A class can have only one constructor."),
        ("@ A { m() {} m() {} }", "Error at 'm': Method is already declared in this class."),
        ("@ A {} @ A {}", "Error at 'A': Class is already declared."),
    ],
)
def test_semantic_errors(src, message):
    with pytest.raises(SemanticError) as exc:
        parse(src)
    assert exc.value.message == message
    assert exc.value.kind == "SemanticError"
