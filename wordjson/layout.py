"""
Layout - Binary layout of an encoded buffer.

An encoded buffer is a sequence of fixed-width words. Every value starts
with a one-word tag, followed by its payload:

    NULL, TRUE, FALSE    nothing
    NUMBER               a double, stored in DOUBLE_WORDS words
    STRING               NUL-terminated bytes, padded to whole words
    ARRAY                a count n, then n values
    OBJECT               a count n, then n (key, value) pairs
"""

import struct
from enum import IntEnum


class Tag(IntEnum):
    """Discriminant stored in the first word of every value."""

    NULL = 0
    TRUE = 1
    FALSE = 2
    NUMBER = 3
    STRING = 4
    ARRAY = 5
    OBJECT = 6


WORD = struct.Struct('=I')
DOUBLE = struct.Struct('=d')

WORD_SIZE = WORD.size
DOUBLE_WORDS = DOUBLE.size // WORD_SIZE


def align(size: int) -> int:
    """Return the number of words needed to hold size bytes."""
    return (size + WORD_SIZE - 1) // WORD_SIZE
