# =============================================================================
# test_natural.py - Natural-Language Normalizer Unit Tests
# =============================================================================
# Tests for English sentence normalization and conversion to postfix.
#
# Test coverage includes:
#   - Lower-casing and punctuation stripping
#   - Greedy longest-first phrase folding
#   - Number, operator and filler word mapping
#   - Lenient pass-through of unknown words
#   - End-to-end sentence to postfix conversion
# =============================================================================

import pytest
from math_compiler.natural import (
    convert_to_infix,
    fold_phrases,
    natural_language_to_postfix,
    tokenize_words,
)
from math_compiler.infix import to_postfix


# =============================================================================
# Word Splitting Tests
# =============================================================================

class TestWordSplitting:
    """Test splitting, lower-casing and punctuation removal."""

    def test_lower_case(self):
        assert tokenize_words("Three PLUS Four") == ["three", "plus", "four"]

    def test_punctuation_stripped(self):
        """Commas, question and exclamation marks disappear."""
        assert tokenize_words("What is 3, plus 4?!") == ["what", "is", "3", "plus", "4"]

    def test_decimal_point_kept(self):
        assert tokenize_words("2.5 times 4") == ["2.5", "times", "4"]

    def test_punctuation_only_word_dropped(self):
        """A word made only of punctuation leaves nothing behind."""
        assert tokenize_words("one , two") == ["one", "two"]

    def test_empty_sentence(self):
        assert tokenize_words("") == []


# =============================================================================
# Phrase Folding Tests
# =============================================================================

class TestPhraseFolding:
    """Test multi-word phrase merging."""

    def test_power_phrase(self):
        """'to the power of' folds into one word."""
        assert tokenize_words("five to the power of two") == [
            "five", "to the power of", "two",
        ]

    def test_square_root_of(self):
        """The three-word phrase wins over 'square root'."""
        assert tokenize_words("square root of nine") == ["square root of", "nine"]

    def test_square_root(self):
        assert tokenize_words("square root nine") == ["square root", "nine"]

    def test_incomplete_phrase_untouched(self):
        """'to the power' without 'of' is left alone."""
        assert tokenize_words("to the power") == ["to", "the", "power"]

    def test_phrase_at_end(self):
        assert fold_phrases(["nine", "square", "root"]) == ["nine", "square root"]

    def test_multiple_phrases(self):
        words = tokenize_words("square root of two to the power of three")
        assert words == ["square root of", "two", "to the power of", "three"]

    def test_folded_word_not_refolded(self):
        """Each index is visited once; folding does not cascade."""
        assert fold_phrases(["square", "square", "root"]) == ["square", "square root"]


# =============================================================================
# Word Mapping Tests
# =============================================================================

class TestConvertToInfix:
    """Test mapping of words to infix tokens."""

    def test_three_plus_four(self):
        assert convert_to_infix(tokenize_words("three plus four")) == ["3", "+", "4"]

    def test_numerals_pass_through(self):
        assert convert_to_infix(["12", "times", "2.5"]) == ["12", "*", "2.5"]

    def test_filler_words_dropped(self):
        """'divided BY', 'what IS', 'THE' carry no meaning."""
        words = tokenize_words("the answer is ten divided by two")
        assert convert_to_infix(words) == ["answer", "10", "/", "2"]

    def test_power_phrase_maps_to_caret(self):
        words = tokenize_words("five to the power of two")
        assert convert_to_infix(words) == ["5", "^", "2"]

    def test_functions(self):
        assert convert_to_infix(["sine", "cosine", "tangent", "square root of"]) == [
            "sin", "cos", "tan", "sqrt",
        ]

    def test_constants(self):
        assert convert_to_infix(["pi", "times", "e"]) == ["pi", "*", "e"]

    def test_symbols_and_parentheses_pass_through(self):
        assert convert_to_infix(["(", "3", "+", "4", ")", "!"]) == [
            "(", "3", "+", "4", ")", "!",
        ]

    def test_unknown_word_passes_through(self):
        """Unknown words are kept rather than rejected."""
        assert convert_to_infix(["three", "plus", "banana"]) == ["3", "+", "banana"]

    def test_empty_word_passes_through(self):
        """An empty word is kept without raising."""
        assert convert_to_infix(["three", "", "plus", "four"]) == ["3", "", "+", "4"]

    def test_empty_word_dropped_by_converter(self):
        assert to_postfix(convert_to_infix(["three", "", "plus", "four"])) == "3 4 +"

    @pytest.mark.parametrize("word, symbol", [
        ("add", "+"), ("sum", "+"),
        ("subtract", "-"), ("difference", "-"),
        ("multiplied", "*"), ("product", "*"),
        ("over", "/"), ("quotient", "/"),
        ("raised", "^"), ("exponent", "^"),
        ("mod", "%"), ("remainder", "%"),
        ("factorial", "!"),
        ("absolute", "abs"),
    ])
    def test_operator_synonyms(self, word, symbol):
        assert convert_to_infix([word]) == [symbol]


# =============================================================================
# End-to-End Conversion Tests
# =============================================================================

class TestNaturalLanguageToPostfix:
    """Test complete sentence to postfix conversion."""

    @pytest.mark.parametrize("sentence, postfix", [
        ("three plus four", "3 4 +"),
        ("two plus three times four", "2 3 4 * +"),
        ("two times three plus four", "2 3 * 4 +"),
        ("ten minus four minus three", "10 4 - 3 -"),
        ("five to the power of two", "5 2 ^"),
        ("two to the power of three to the power of two", "2 3 2 ^ ^"),
        ("five factorial", "5 !"),
        ("five factorial plus one", "5 ! 1 +"),
        ("the square root of sixteen", "16 sqrt"),
        ("sine of pi", "pi sin"),
        ("ten mod three", "10 3 %"),
        ("What is twenty divided by four?", "20 4 /"),
        ("2.5 times 4", "2.5 4 *"),
    ])
    def test_sentences(self, sentence, postfix):
        assert natural_language_to_postfix(sentence) == postfix

    def test_unknown_words_dropped_by_converter(self):
        """Nonsense degrades into a lenient, possibly wrong, expression."""
        assert natural_language_to_postfix("three plus banana") == "3 +"

    def test_empty_sentence(self):
        assert natural_language_to_postfix("") == ""
