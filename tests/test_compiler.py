# =============================================================================
# test_compiler.py - Compiler Pipeline Tests
# =============================================================================
# Tests for input classification, the MathCompiler facade and options.
# =============================================================================

from pathlib import Path

import pytest
from math_compiler import (
    CompilerOptions,
    MathCompiler,
    MathCompilerError,
    UnknownTokenError,
    compile_to_assembly,
    is_natural_language,
)
from math_compiler.lexer import TokenKind


# =============================================================================
# Input Classification Tests
# =============================================================================

class TestInputClassification:
    """Test the postfix/English decision."""

    @pytest.mark.parametrize("text", [
        "3 4 +",
        "pi 2 * sin",
        "1e3 dup *",
        "16 sqrt 2 swap -",
        "-3 abs e ^",
        "",
    ])
    def test_postfix(self, text):
        assert not is_natural_language(text)

    @pytest.mark.parametrize("text", [
        "three plus four",
        "two plus 2",
        "What is 5 times 6?",
        "3 4 plus",
    ])
    def test_english(self, text):
        assert is_natural_language(text)


# =============================================================================
# MathCompiler Tests
# =============================================================================

class TestMathCompiler:
    """Test the compilation pipeline."""

    def test_postfix_source(self):
        result = MathCompiler().compile_source("  3 4 +  ")
        assert not result.natural_language
        assert result.postfix == "3 4 +"
        assert result.token_count == 3
        assert result.tokens[2].kind is TokenKind.OPERATOR
        assert "addsd" in result.assembly

    def test_english_source(self):
        result = MathCompiler().compile_source("five to the power of two")
        assert result.natural_language
        assert result.postfix == "5 2 ^"
        assert "power_done_1:" in result.assembly

    def test_english_with_unknown_words(self):
        """Unknown English words are dropped on the way to postfix."""
        result = MathCompiler().compile_source("What is twenty divided by four?")
        assert result.postfix == "20 4 /"

    def test_unknown_postfix_token(self):
        with pytest.raises(UnknownTokenError) as exc_info:
            MathCompiler().compile_source("3 4 &")
        assert exc_info.value.token == "&"
        assert exc_info.value.position == 3

    def test_errors_share_base_class(self):
        with pytest.raises(MathCompilerError, match="unknown token '1x'"):
            compile_to_assembly("3 1x +")

    def test_error_message_has_hint(self):
        with pytest.raises(UnknownTokenError) as exc_info:
            compile_to_assembly("3 &")
        message = str(exc_info.value)
        assert message.startswith("error: unknown token '&' at word 2")
        assert "\nhint: " in message

    def test_comments_option(self):
        plain = MathCompiler(CompilerOptions(output_comments=False))
        assert "; Token:" not in plain.compile_to_string("3 4 +")
        assert "; Token: +" in MathCompiler().compile_to_string("3 4 +")

    def test_compile_to_assembly_matches_facade(self):
        assert compile_to_assembly("2 3 ^") == MathCompiler().compile_to_string("2 3 ^")

    def test_compile_to_file(self, tmp_path):
        output = tmp_path / "nested" / "dir" / "out.asm"
        result = MathCompiler().compile_to_file("one plus two", output)
        assert output.read_text() == result.assembly
        assert result.postfix == "1 2 +"

    def test_compile_to_file_failure_writes_nothing(self, tmp_path):
        output = tmp_path / "out.asm"
        with pytest.raises(UnknownTokenError):
            MathCompiler().compile_to_file("3 4 &", output)
        assert not output.exists()


# =============================================================================
# Options Tests
# =============================================================================

class TestCompilerOptions:
    """Test configuration defaults and environment overrides."""

    def test_defaults(self):
        options = CompilerOptions()
        assert options.output_comments
        assert options.output_dir == Path("output")

    def test_from_env_defaults(self, monkeypatch):
        monkeypatch.delenv("MATH_COMPILER_OUTPUT_DIR", raising=False)
        monkeypatch.delenv("MATH_COMPILER_COMMENTS", raising=False)
        assert CompilerOptions.from_env() == CompilerOptions()

    def test_from_env_output_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MATH_COMPILER_OUTPUT_DIR", str(tmp_path))
        assert CompilerOptions.from_env().output_dir == tmp_path

    @pytest.mark.parametrize("value, expected", [
        ("0", False),
        ("false", False),
        ("OFF", False),
        ("no", False),
        ("1", True),
        ("yes", True),
    ])
    def test_from_env_comments(self, monkeypatch, value, expected):
        monkeypatch.setenv("MATH_COMPILER_COMMENTS", value)
        assert CompilerOptions.from_env().output_comments is expected
