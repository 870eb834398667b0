"""
Natural-Language Normalizer
===========================

This module turns an English arithmetic sentence into an infix token
stream that the shunting-yard converter (``math_compiler.infix``) can
reduce to postfix.

Normalization Steps
-------------------
1. **Word splitting**: split on whitespace, lower-case every word and
   strip punctuation except the decimal point. Empty words are dropped.
2. **Phrase folding**: merge the multi-word phrases "to the power of",
   "square root of" and "square root" into single words. At each index
   the longest phrase is tried first, and each index is visited once.
3. **Word mapping**: number words become numerals, operator words become
   operator symbols, filler words ("by", "the", ...) are dropped.
   Words that are already numerals, symbols or parentheses pass through.

Unrecognised words are never an error: they pass through unchanged and
the converter discards them. Nonsense input therefore degrades into a
(possibly wrong) postfix expression instead of failing.

Example
-------
>>> from math_compiler.natural import tokenize_words, convert_to_infix
>>> words = tokenize_words("Five to the power of two, plus one!")
>>> words
['five', 'to the power of', 'two', 'plus', 'one']
>>> convert_to_infix(words)
['5', '^', '2', '+', '1']
"""

import logging
import string
from typing import Iterable, Sequence

from math_compiler.infix import to_postfix
from math_compiler.symbols import (
    DEFAULT_SYMBOLS,
    FILLER_WORDS,
    PHRASES,
    SymbolTable,
)

logger = logging.getLogger(__name__)

# Every ASCII punctuation mark except the decimal point
_STRIP_TABLE = str.maketrans("", "", string.punctuation.replace(".", ""))

# First characters of words that already look like numerals or symbols
_SYMBOL_STARTS = frozenset("0123456789.-+*/^%!")


# =============================================================================
# Word Splitting and Phrase Folding
# =============================================================================

def tokenize_words(sentence: str) -> list[str]:
    """
    Split a sentence into normalized words with known phrases folded.

    Args:
        sentence: English text, e.g. ``"What is the square root of 16?"``

    Returns:
        Lower-case words; folded phrases appear as one space-joined word
    """
    words = []
    for raw in sentence.split():
        word = raw.lower().translate(_STRIP_TABLE)
        if word:
            words.append(word)
    return fold_phrases(words)


def fold_phrases(words: Sequence[str]) -> list[str]:
    """
    Merge known multi-word phrases, scanning left to right.

    Phrases are tried longest first at each index. A folded word is not
    re-examined, so folding never cascades.
    """
    result = list(words)
    i = 0
    while i < len(result):
        for phrase in PHRASES:
            end = i + len(phrase)
            if tuple(result[i:end]) == phrase:
                result[i:end] = [" ".join(phrase)]
                break
        i += 1
    return result


# =============================================================================
# Word Mapping
# =============================================================================

def _looks_like_symbol(word: str) -> bool:
    return word[:1] in _SYMBOL_STARTS or word in ("(", ")")


def convert_to_infix(
    words: Iterable[str],
    symbols: SymbolTable = DEFAULT_SYMBOLS,
) -> list[str]:
    """
    Map normalized words onto infix tokens.

    Args:
        words: Output of :func:`tokenize_words`
        symbols: Vocabulary (defaults to the built-in tables)

    Returns:
        Infix tokens: numerals, constant names, operator symbols,
        function names and any unrecognised words
    """
    tokens = []
    for word in words:
        if word in symbols.word_to_number:
            tokens.append(symbols.word_to_number[word])
        elif word in symbols.word_to_operator:
            tokens.append(symbols.word_to_operator[word])
        elif _looks_like_symbol(word):
            tokens.append(word)
        elif word in FILLER_WORDS:
            continue
        else:
            logger.debug(f"Passing through unrecognised word {word!r}")
            tokens.append(word)
    return tokens


def natural_language_to_postfix(
    sentence: str,
    symbols: SymbolTable = DEFAULT_SYMBOLS,
) -> str:
    """
    Convert an English arithmetic sentence to postfix text.

    >>> natural_language_to_postfix("three plus four")
    '3 4 +'
    """
    infix = convert_to_infix(tokenize_words(sentence), symbols)
    postfix = to_postfix(infix, symbols)
    logger.debug(f"Converted {sentence!r} -> infix {infix} -> postfix {postfix!r}")
    return postfix
