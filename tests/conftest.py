import struct

import pytest

from wordjson.layout import WORD_SIZE


def unpack_words(buffer: bytes):
    """Split an encoded buffer into its words."""
    return list(struct.unpack(f'={len(buffer) // WORD_SIZE}I', buffer))


def unpack_double(buffer: bytes, offset: int) -> float:
    """Read the double stored at a word offset."""
    return struct.unpack_from('=d', buffer, offset * WORD_SIZE)[0]


@pytest.fixture
def words():
    return unpack_words


@pytest.fixture
def double_at():
    return unpack_double
