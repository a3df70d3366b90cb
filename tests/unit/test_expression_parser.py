"""Expression parser unit tests.

Tests tokenizing and tree construction:
- operator precedence and associativity
- literals (numbers, strings, booleans)
- legacy `values.x` / `values["x"]` spelling
- MalformedExpression for syntax errors, with position
"""

import pytest

from offer_engine.exceptions import MalformedExpression
from offer_engine.layers.layer1_expression import (
    BinaryOp,
    Identifier,
    Literal,
    Ternary,
    UnaryOp,
    parse_expression,
    referenced_identifiers,
    tokenize,
    tree_depth,
)


class TestTokenize:
    def test_ends_with_eof(self):
        tokens = tokenize("a + 1")
        assert [t.kind for t in tokens] == ["IDENT", "OP", "NUMBER", "EOF"]

    def test_longest_operator_wins(self):
        tokens = tokenize("a <= b && c != d")
        ops = [t.value for t in tokens if t.kind == "OP"]
        assert ops == ["<=", "&&", "!="]

    def test_strict_equality_is_alias(self):
        tokens = tokenize("a === b !== c")
        ops = [t.value for t in tokens if t.kind == "OP"]
        assert ops == ["==", "!="]

    def test_string_token_position_is_start_quote(self):
        tokens = tokenize("x == 'abc'")
        string_token = [t for t in tokens if t.kind == "STRING"][0]
        assert string_token.value == "abc"
        assert string_token.position == 5

    def test_unexpected_character(self):
        with pytest.raises(MalformedExpression) as exc_info:
            tokenize("a # b")
        assert exc_info.value.position == 2


class TestParseLiterals:
    def test_number(self):
        assert parse_expression("2.5") == Literal(2.5)

    def test_leading_dot_number(self):
        assert parse_expression(".5") == Literal(0.5)

    def test_exponent(self):
        assert parse_expression("1e3") == Literal(1000.0)

    def test_string_with_escape(self):
        assert parse_expression(r"'it\'s'") == Literal("it's")

    def test_double_quoted_string(self):
        assert parse_expression('"outdoor"') == Literal("outdoor")

    def test_booleans(self):
        assert parse_expression("true") == Literal(True)
        assert parse_expression("false") == Literal(False)


class TestParsePrecedence:
    def test_multiplication_binds_tighter(self):
        node = parse_expression("1 + 2 * 3")
        assert node == BinaryOp("+", Literal(1.0), BinaryOp("*", Literal(2.0), Literal(3.0)))

    def test_left_associative_subtraction(self):
        node = parse_expression("10 - 3 - 2")
        assert node == BinaryOp("-", BinaryOp("-", Literal(10.0), Literal(3.0)), Literal(2.0))

    def test_parentheses(self):
        node = parse_expression("(1 + 2) * 3")
        assert node == BinaryOp("*", BinaryOp("+", Literal(1.0), Literal(2.0)), Literal(3.0))

    def test_and_binds_tighter_than_or(self):
        node = parse_expression("a || b && c")
        assert node == BinaryOp("||", Identifier("a"), BinaryOp("&&", Identifier("b"), Identifier("c")))

    def test_comparison_inside_logic(self):
        node = parse_expression("rooms > 2 && hasAlarm == true")
        assert isinstance(node, BinaryOp) and node.op == "&&"
        assert node.left == BinaryOp(">", Identifier("rooms"), Literal(2.0))
        assert node.right == BinaryOp("==", Identifier("hasAlarm"), Literal(True))

    def test_unary(self):
        assert parse_expression("!flag") == UnaryOp("!", Identifier("flag"))
        assert parse_expression("--x") == UnaryOp("-", UnaryOp("-", Identifier("x")))

    def test_ternary_is_right_associative(self):
        node = parse_expression("a ? 1 : b ? 2 : 3")
        assert node == Ternary(
            Identifier("a"),
            Literal(1.0),
            Ternary(Identifier("b"), Literal(2.0), Literal(3.0)),
        )


class TestLegacyValuesAccess:
    def test_dot_access(self):
        assert parse_expression("values.area * 2") == BinaryOp("*", Identifier("area"), Literal(2.0))

    def test_bracket_access(self):
        assert parse_expression('values["room-count"]') == Identifier("room-count")

    def test_member_access_on_other_names_is_rejected(self):
        with pytest.raises(MalformedExpression):
            parse_expression("Math.max")


class TestMalformed:
    @pytest.mark.parametrize(
        "expression",
        ["", "   ", "1 +", "(1 + 2", "a ? 1", "1 2", "'open", "values.", "values[area]", "* 2", "1e999"],
    )
    def test_syntax_errors(self, expression):
        with pytest.raises(MalformedExpression):
            parse_expression(expression)

    def test_error_reports_position(self):
        with pytest.raises(MalformedExpression) as exc_info:
            parse_expression("1 + )")
        assert exc_info.value.position == 4
        assert exc_info.value.expression == "1 + )"

    def test_function_calls_are_not_supported(self):
        with pytest.raises(MalformedExpression):
            parse_expression("max(1, 2)")


class TestNestingLimit:
    @pytest.mark.parametrize(
        "expression",
        [
            "-" * 3000 + "1",
            "!" * 3000 + "true",
            "(" * 3000 + "1" + ")" * 3000,
            "1" + " + 1" * 500,
            "a ? 1 : " * 100 + "0",
        ],
    )
    def test_deep_nesting_is_malformed(self, expression):
        with pytest.raises(MalformedExpression) as exc_info:
            parse_expression(expression)
        assert "nested too deeply" in exc_info.value.reason

    def test_moderate_nesting_still_parses(self):
        node = parse_expression("(" * 20 + "rooms * 2" + ")" * 20)
        assert node == BinaryOp("*", Identifier("rooms"), Literal(2.0))

    def test_moderate_chain_still_parses(self):
        node = parse_expression("1" + " + 1" * 50)
        assert tree_depth(node) == 51

    def test_tree_depth(self):
        assert tree_depth(parse_expression("a")) == 1
        assert tree_depth(parse_expression("--a")) == 3
        assert tree_depth(parse_expression("a ? b + 1 : c")) == 3


class TestParseCache:
    def test_same_tree_for_same_text(self):
        assert parse_expression("a + b") is parse_expression("a + b")


def test_referenced_identifiers_in_order():
    node = parse_expression("b > 1 ? a + b : c")
    assert referenced_identifiers(node) == ["b", "a", "c"]
