"""Unit tests for SQLGenerator and the placeholder compilers."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from fluentql.compile.generator import RuntimeContext, SQLGenerator
from fluentql.compile.paramstyles import FormatCompiler, NumericCompiler
from fluentql.compile.registry import CompilerFactory
from fluentql.errors import CompilationError, UnsupportedCallError, UnsupportedOperatorError
from fluentql.parse.parser import ExpressionParser
from fluentql.schema.nodes import (
    BinaryNode,
    CallNode,
    LiteralNode,
    LogicalNode,
    MemberNode,
    UnaryNode,
)


def _gen(generator: SQLGenerator, fragment):
    return generator.generate_with_params(ExpressionParser.parse(fragment))


# ---------------------------------------------------------------------------
# Node kinds
# ---------------------------------------------------------------------------


def test_member_emits_bare_name(generator):
    assert _gen(generator, lambda u: u.isActive) == ("isActive", [])


def test_qualified_member_is_emitted_unchanged(generator):
    assert _gen(generator, lambda u: u["users.id"] == 3) == ("users.id = ?", [3])


@pytest.mark.parametrize(
    "fragment, sql",
    [
        (lambda u: u.age == 18, "age = ?"),
        (lambda u: u.age != 18, "age != ?"),
        (lambda u: u.age > 18, "age > ?"),
        (lambda u: u.age < 18, "age < ?"),
        (lambda u: u.age >= 18, "age >= ?"),
        (lambda u: u.age <= 18, "age <= ?"),
    ],
)
def test_single_comparison_binds_one_param(generator, fragment, sql):
    text, params = _gen(generator, fragment)
    assert text == sql
    assert text.count("?") == 1
    assert params == [18]


def test_field_to_field_comparison_binds_nothing(generator):
    assert _gen(generator, "created == updated") == ("created = updated", [])


def test_logical_is_always_parenthesized(generator):
    sql, params = _gen(generator, "age > 18 and isActive == True")
    assert sql == "(age > ? AND isActive = ?)"
    assert params == [18, True]


def test_nested_logical_parenthesizes_every_level(generator):
    sql, params = _gen(generator, "a == 1 or b == 2 and c == 3")
    assert sql == "(a = ? OR (b = ? AND c = ?))"
    assert params == [1, 2, 3]


def test_params_follow_leaf_order(generator):
    sql, params = _gen(
        generator,
        lambda u: ((u.a == "x") | (u.b > 2)) & ~(u.c.in_([7, 8])) & u.d.startswith("p"),
    )
    assert sql == "(((a = ? OR b > ?) AND NOT c IN (?, ?)) AND d LIKE ? ESCAPE '!')"
    assert params == ["x", 2, 7, 8, "p%"]


def test_not_prefix(generator):
    assert _gen(generator, "not (age > 18 and isActive == True)") == (
        "NOT (age > ? AND isActive = ?)",
        [18, True],
    )


def test_null_literal_is_bound(generator):
    assert _gen(generator, "deletedAt == None") == ("deletedAt = ?", [None])


# ---------------------------------------------------------------------------
# Calls
# ---------------------------------------------------------------------------


def test_membership_binds_each_value(generator):
    sql, params = _gen(generator, "country in ('USA', 'UK', 'FR')")
    assert sql == "country IN (?, ?, ?)"
    assert params == ["USA", "UK", "FR"]


def test_startswith_binds_prefix_pattern(generator):
    assert _gen(generator, lambda u: u.name.startswith("Al")) == (
        "name LIKE ? ESCAPE '!'",
        ["Al%"],
    )


def test_endswith_binds_suffix_pattern(generator):
    assert _gen(generator, lambda u: u.email.endswith(".com")) == (
        "email LIKE ? ESCAPE '!'",
        ["%.com"],
    )


def test_like_wildcards_in_term_are_escaped(generator):
    _, params = _gen(generator, lambda u: u.code.startswith("50%_off!"))
    assert params == ["50!%!_off!!%"]


def test_unknown_callee_raises(generator):
    node = CallNode(callee="contains", arguments=(MemberNode(name="name"), LiteralNode(value="x")))
    with pytest.raises(UnsupportedCallError) as exc_info:
        generator.generate(node)
    assert exc_info.value.callee == "contains"


def test_pattern_call_with_non_string_term_raises(generator):
    node = CallNode(callee="startswith", arguments=(MemberNode(name="name"), LiteralNode(value=3)))
    with pytest.raises(CompilationError):
        generator.generate(node)


def test_membership_without_values_raises(generator):
    node = CallNode(callee="in_", arguments=(MemberNode(name="id"),))
    with pytest.raises(CompilationError):
        generator.generate(node)


# ---------------------------------------------------------------------------
# Operator mapping
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("op", ["===", "+", "LIKE", "<>"])
def test_unmapped_binary_operator_raises(generator, op):
    node = BinaryNode(operator=op, left=MemberNode(name="a"), right=LiteralNode(value=1))
    with pytest.raises(UnsupportedOperatorError) as exc_info:
        generator.generate(node)
    assert exc_info.value.operator == op


def test_unmapped_logical_operator_fails_at_generation(generator):
    node = LogicalNode(
        operator="XOR",
        left=BinaryNode(operator="==", left=MemberNode(name="a"), right=LiteralNode(value=1)),
        right=MemberNode(name="b"),
    )
    with pytest.raises(UnsupportedOperatorError) as exc_info:
        generator.generate(node)
    assert exc_info.value.operator == "XOR"


def test_unmapped_unary_operator_raises(generator):
    node = UnaryNode(operator="-", operand=MemberNode(name="a"))
    with pytest.raises(UnsupportedOperatorError):
        generator.generate(node)


def test_unsupported_operator_deep_in_tree_raises(generator):
    bad = BinaryNode(operator="%", left=MemberNode(name="a"), right=LiteralNode(value=2))
    node = LogicalNode(
        operator="AND",
        left=BinaryNode(operator="==", left=MemberNode(name="b"), right=LiteralNode(value=1)),
        right=bad,
    )
    with pytest.raises(UnsupportedOperatorError):
        generator.generate(node)


def test_deeply_nested_tree_raises_compilation_error():
    node = MemberNode(name="a")
    for _ in range(5000):
        node = UnaryNode(operator="not", operand=node)
    with pytest.raises(CompilationError) as exc_info:
        SQLGenerator(NumericCompiler(), clause="WHERE").generate_with_params(node)
    assert exc_info.value.clause == "WHERE"


# ---------------------------------------------------------------------------
# Accumulator ownership
# ---------------------------------------------------------------------------


def test_each_call_gets_a_fresh_accumulator(generator):
    node = ExpressionParser.parse("age > 18")
    assert generator.generate_with_params(node) == ("age > ?", [18])
    assert generator.generate_with_params(node) == ("age > ?", [18])


def test_explicit_runtime_is_appended_to(generator):
    runtime = RuntimeContext()
    generator.generate(ExpressionParser.parse("a == 1"), runtime)
    generator.generate(ExpressionParser.parse("b == 2"), runtime)
    assert runtime.params == [1, 2]


def test_shared_generator_across_threads(generator):
    nodes = [ExpressionParser.parse(f"a == {i} and b == {i + 1}") for i in range(200)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(generator.generate_with_params, nodes))

    for i, (sql, params) in enumerate(results):
        assert sql == "(a = ? AND b = ?)"
        assert params == [i, i + 1]


# ---------------------------------------------------------------------------
# Placeholder styles
# ---------------------------------------------------------------------------


def test_format_placeholders():
    gen = SQLGenerator(FormatCompiler())
    sql, params = gen.generate_with_params(ExpressionParser.parse("a == 1 and b in (2, 3)"))
    assert sql == "(a = %s AND b IN (%s, %s))"
    assert params == [1, 2, 3]


def test_numeric_placeholders_are_numbered_in_emission_order():
    gen = SQLGenerator(NumericCompiler())
    sql, _ = gen.generate_with_params(ExpressionParser.parse("a == 1 and b in (2, 3)"))
    assert sql == "(a = :1 AND b IN (:2, :3))"


def test_factory_knows_builtin_styles():
    assert {"format", "numeric", "qmark"} <= set(CompilerFactory.registered_paramstyles())
    assert CompilerFactory.create("numeric").paramstyle == "numeric"


def test_factory_rejects_unknown_style():
    with pytest.raises(CompilationError, match="pyformat"):
        CompilerFactory.create("pyformat")
