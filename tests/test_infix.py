# =============================================================================
# test_infix.py - Infix to Postfix Converter Unit Tests
# =============================================================================
# Tests for the shunting-yard converter.
#
# Test coverage includes:
#   - Precedence and associativity
#   - Parentheses, balanced and unbalanced
#   - Prefix functions and the postfix factorial
#   - Operand recognition (negatives, bare fractions, constants)
#   - Lenient handling of unknown tokens
# =============================================================================

import pytest
from math_compiler.infix import InfixConverter, is_operand, to_postfix
from math_compiler.lexer import tokenize


def convert(expression: str) -> str:
    """Helper converting a space-separated infix string."""
    return to_postfix(expression.split())


# =============================================================================
# Precedence and Associativity Tests
# =============================================================================

class TestPrecedence:
    """Test operator precedence and associativity."""

    def test_simple(self):
        assert convert("3 + 4") == "3 4 +"

    def test_right_associative_power(self):
        """2 ^ 3 ^ 2 nests to the right."""
        assert to_postfix(["2", "^", "3", "^", "2"]) == "2 3 2 ^ ^"

    def test_left_associative_minus(self):
        """2 - 3 - 1 nests to the left."""
        assert to_postfix(["2", "-", "3", "-", "1"]) == "2 3 - 1 -"

    def test_left_associative_division(self):
        assert convert("8 / 4 / 2") == "8 4 / 2 /"

    def test_multiplication_binds_tighter(self):
        assert convert("1 + 2 * 3") == "1 2 3 * +"
        assert convert("1 * 2 + 3") == "1 2 * 3 +"

    def test_power_binds_tighter_than_multiplication(self):
        assert convert("2 * 3 ^ 2") == "2 3 2 ^ *"
        assert convert("2 ^ 3 * 4") == "2 3 ^ 4 *"

    def test_modulus_same_rank_as_multiplication(self):
        assert convert("7 % 3 * 2") == "7 3 % 2 *"

    def test_factorial(self):
        assert convert("3 ! + 1") == "3 ! 1 +"


# =============================================================================
# Parentheses and Function Tests
# =============================================================================

class TestGrouping:
    """Test parentheses and prefix functions."""

    def test_parentheses(self):
        assert convert("( 2 + 3 ) * 4") == "2 3 + 4 *"

    def test_nested_parentheses(self):
        assert convert("( ( 1 + 2 ) * ( 3 - 4 ) )") == "1 2 + 3 4 - *"

    def test_unclosed_parenthesis(self):
        """A stray '(' is discarded at the end."""
        assert convert("( 2 + 3") == "2 3 +"

    def test_unopened_parenthesis(self):
        """A stray ')' is tolerated."""
        assert convert("2 + 3 ) * 4") == "2 3 + 4 *"

    def test_function(self):
        assert convert("sqrt 16") == "16 sqrt"

    def test_function_applies_before_operator(self):
        assert convert("sin 30 + 1") == "30 sin 1 +"

    def test_function_with_group(self):
        assert convert("sin ( 30 + 60 ) * 2") == "30 60 + sin 2 *"

    def test_abs(self):
        assert convert("abs -3 + 1") == "-3 abs 1 +"


# =============================================================================
# Operand and Leniency Tests
# =============================================================================

class TestOperands:
    """Test operand recognition and discarded tokens."""

    @pytest.mark.parametrize("token", ["3", "3.5", "-5", ".5", "pi", "e", "1e3"])
    def test_operands(self, token):
        assert is_operand(token)

    @pytest.mark.parametrize("token", ["-", "+", "x", "(", "sin", ".", "-x"])
    def test_not_operands(self, token):
        assert not is_operand(token)

    def test_negative_literal(self):
        assert convert("-5 + 2") == "-5 2 +"

    def test_unknown_tokens_discarded(self):
        assert convert("3 + banana 4") == "3 4 +"

    def test_empty(self):
        assert to_postfix([]) == ""

    def test_empty_strings_ignored(self):
        assert to_postfix(["", "1", "", "+", "2"]) == "1 2 +"

    def test_converter_reusable(self):
        """One converter instance handles independent streams."""
        converter = InfixConverter()
        assert converter.convert(["1", "+", "2"]) == "1 2 +"
        assert converter.convert(["3", "*", "4"]) == "3 4 *"


class TestPostfixFixedPoint:
    """Postfix text survives conversion and re-tokenization unchanged."""

    @pytest.mark.parametrize("postfix", ["3 4 +", "5 !", "pi 2"])
    def test_fixed_point(self, postfix):
        converted = to_postfix(postfix.split())
        assert converted == postfix
        assert tokenize(converted) == tokenize(postfix)
