import pytest

from plusplus.ctx import Ctx
from plusplus.errors import (
    ArityError,
    DuplicateClass,
    RedeclaredVariable,
    UnknownClass,
    UnknownMethod,
    UnsetField,
)
from plusplus.runtime import (
    BUILTINS,
    ClassRegistry,
    Method,
    PPClass,
    PPInstance,
    Session,
    format_number,
    show,
    show_repr,
    truthy,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "void"),
        (1.0, "1"),
        (-3.0, "-3"),
        (2.5, "2.5"),
        (1e-07, "0.0000001"),
        ("texto", "texto"),
        ([], "[]"),
        ([1.0, "a", [None]], '[1, "a", [void]]'),
    ],
)
def test_show(value, expected):
    assert show(value) == expected


def test_show_objects():
    tree = PPClass("Tree")
    assert show(tree) == "<class Tree>"
    assert show(PPInstance(tree)) == "<Tree instance>"
    assert show_repr("a\nb") == '"a\\nb"'
    assert format_number(10.0) == "10"


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, False),
        ([], False),
        ([None], True),
        (0.0, True),
        ("", True),
        (PPInstance(PPClass("A")), True),
        (PPClass("A"), True),
    ],
)
def test_truthy(value, expected):
    assert truthy(value) is expected


def test_scope_lookup_walks_parents():
    root = Ctx.from_dict({"x": 1.0})
    child = root.push({"y": 2.0})
    assert child["x"] == 1.0
    assert child["y"] == 2.0
    with pytest.raises(KeyError):
        child["z"]


def test_redeclaration_and_shadowing():
    root = Ctx()
    root.var_def("x", 1.0)
    with pytest.raises(RedeclaredVariable):
        root.var_def("x", 2.0)

    child = root.push()
    child.var_def("x", 3.0)
    assert child["x"] == 3.0
    assert root["x"] == 1.0


def test_push_keeps_receiver_and_session():
    session = Session()
    instance = PPInstance(PPClass("A"))
    ctx = session.new_ctx().enter_method(instance, {"a": None})
    inner = ctx.push()
    assert inner.receiver is instance
    assert inner.session is session
    assert ctx.parent is None
    assert inner.pretty().splitlines() == [" 1: <empty>", " 0: a = void"]


def test_instance_fields():
    instance = PPInstance(PPClass("Tree"))
    with pytest.raises(UnsetField):
        instance.get("value")
    instance.set("value", 1.0)
    instance.set("value", 2.0)
    assert instance.get("value") == 2.0
    assert instance.fields == {"value": 2.0}


def test_method_binds_missing_arguments_to_void():
    method = Method("m", ["a", "b"], [])
    assert method.bind_args((1.0,)) == {"a": 1.0, "b": None}
    with pytest.raises(ArityError):
        method.bind_args((1.0, 2.0, 3.0))


def test_class_without_constructor():
    pp_class = PPClass("Empty")
    instance = pp_class.instantiate(Session().new_ctx(), ())
    assert instance.pp_class is pp_class
    assert instance.fields == {}
    with pytest.raises(ArityError):
        pp_class.instantiate(Session().new_ctx(), (1.0,))
    with pytest.raises(UnknownMethod):
        pp_class.get_method("nope")


def test_class_registry():
    registry = ClassRegistry()
    tree = PPClass("Tree")
    registry.register(tree)
    assert "Tree" in registry
    assert "Forest" not in registry
    assert registry.lookup("Tree") is tree
    with pytest.raises(DuplicateClass):
        registry.register(PPClass("Tree"))
    with pytest.raises(UnknownClass):
        registry.lookup("Forest")


def test_print_builtin_uses_session_output():
    lines = []
    ctx = Session(lines.append).new_ctx()
    assert BUILTINS["print"](ctx, ([1.0, "x"],)) is None
    BUILTINS["print"](ctx, ())
    assert lines == ['[1, "x"]', "void"]
    with pytest.raises(ArityError):
        BUILTINS["print"](ctx, (1.0, 2.0))
