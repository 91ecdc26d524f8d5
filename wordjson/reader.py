"""
Buffer Walker - Read-only traversals over an encoded buffer.

All traversals dispatch on the tag word the same way the parser does and
work on word offsets: each takes the offset of a value and returns the
offset of the word that follows it, so sibling values can be walked one
after the other without any index.
"""

import io
import json as json_module
import logging
import math
from typing import IO, Any, Iterator, Tuple

from .errors import CorruptBufferError
from .layout import DOUBLE, DOUBLE_WORDS, Tag, WORD, WORD_SIZE, align

logger = logging.getLogger(__name__)

SCALAR_TEXT = {
    Tag.NULL: 'null',
    Tag.TRUE: 'true',
    Tag.FALSE: 'false',
}

SCALAR_VALUES = {
    Tag.NULL: None,
    Tag.TRUE: True,
    Tag.FALSE: False,
}


def format_number(value: float) -> str:
    """
    Return the shortest text that parses back to exactly value.

    Integral values print without a fraction, infinities as 1e999 so they
    stay inside the number grammar.
    """
    if math.isinf(value):
        return '1e999' if value > 0 else '-1e999'
    if value == 0 and math.copysign(1.0, value) < 0:
        return '-0'
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


class BufferWalker:
    """
    Walk the values stored in an encoded buffer.

    Invalid tags and reads past the end raise CorruptBufferError: a buffer
    produced by the parser never contains either.
    """

    def __init__(self, buffer: bytes):
        if len(buffer) % WORD_SIZE:
            raise CorruptBufferError("buffer is not a whole number of words", len(buffer) // WORD_SIZE)
        self.buffer = bytes(buffer)
        self.size = len(self.buffer) // WORD_SIZE

    # ========================================================================
    # LOW LEVEL ACCESS
    # ========================================================================

    def _word(self, offset: int) -> int:
        if not 0 <= offset < self.size:
            raise CorruptBufferError("read past end of buffer", offset)
        return WORD.unpack_from(self.buffer, offset * WORD_SIZE)[0]

    def _tag(self, offset: int) -> Tag:
        word = self._word(offset)
        try:
            return Tag(word)
        except ValueError:
            logger.debug("invalid tag %d at word %d", word, offset)
            raise CorruptBufferError(f"invalid tag {word}", offset) from None

    def _double(self, offset: int) -> float:
        if offset + DOUBLE_WORDS > self.size:
            raise CorruptBufferError("truncated number", offset)
        return DOUBLE.unpack_from(self.buffer, offset * WORD_SIZE)[0]

    def _string_end(self, offset: int) -> int:
        """Return the byte index of the NUL ending the string payload at offset."""
        start = offset * WORD_SIZE
        end = self.buffer.find(b'\x00', start)
        if end < 0:
            raise CorruptBufferError("unterminated string", offset)
        return end

    def _string(self, offset: int) -> Tuple[bytes, int]:
        end = self._string_end(offset)
        start = offset * WORD_SIZE
        return self.buffer[start:end], offset + align(end - start + 1)

    def words(self) -> Iterator[Tuple[int, int]]:
        """Yield (offset, word) for every word of the buffer."""
        for offset in range(self.size):
            yield offset, self._word(offset)

    # ========================================================================
    # TRAVERSALS
    # ========================================================================

    def skip(self, offset: int = 0) -> int:
        """Return the offset following the value at offset without reading its payload."""
        tag = self._tag(offset)
        if tag in SCALAR_TEXT:
            return offset + 1
        if tag == Tag.NUMBER:
            end = offset + 1 + DOUBLE_WORDS
            if end > self.size:
                raise CorruptBufferError("truncated number", offset + 1)
            return end
        if tag == Tag.STRING:
            end = self._string_end(offset + 1)
            return offset + 1 + align(end - (offset + 1) * WORD_SIZE + 1)

        count = self._word(offset + 1)
        following = offset + 2
        if tag == Tag.ARRAY:
            for _ in range(count):
                following = self.skip(following)
        else:
            for _ in range(count):
                following = self.skip(self.skip(following))
        return following

    def render(self, out: IO[str], offset: int = 0) -> int:
        """Write the JSON text of the value at offset to out; return the following offset."""
        tag = self._tag(offset)
        if tag in SCALAR_TEXT:
            out.write(SCALAR_TEXT[tag])
            return offset + 1
        if tag == Tag.NUMBER:
            out.write(format_number(self._double(offset + 1)))
            return offset + 1 + DOUBLE_WORDS
        if tag == Tag.STRING:
            raw, following = self._string(offset + 1)
            out.write('"')
            out.write(raw.decode('latin-1'))
            out.write('"')
            return following

        count = self._word(offset + 1)
        following = offset + 2
        if tag == Tag.ARRAY:
            out.write('[')
            for i in range(count):
                if i:
                    out.write(',')
                following = self.render(out, following)
            out.write(']')
        else:
            out.write('{')
            for i in range(count):
                if i:
                    out.write(',')
                following = self.render(out, following)
                out.write(':')
                following = self.render(out, following)
            out.write('}')
        return following

    def dumps(self, offset: int = 0) -> str:
        """Return the JSON text of the value at offset."""
        out = io.StringIO()
        self.render(out, offset)
        return out.getvalue()

    def decode(self, offset: int = 0) -> Tuple[Any, int]:
        """
        Convert the value at offset to plain Python objects.

        Returns:
            The value (None, bool, float, str, list or dict) and the following offset.
        """
        tag = self._tag(offset)
        if tag in SCALAR_VALUES:
            return SCALAR_VALUES[tag], offset + 1
        if tag == Tag.NUMBER:
            return self._double(offset + 1), offset + 1 + DOUBLE_WORDS
        if tag == Tag.STRING:
            raw, following = self._string(offset + 1)
            return _decode_string(raw), following

        count = self._word(offset + 1)
        following = offset + 2
        if tag == Tag.ARRAY:
            items = []
            for _ in range(count):
                item, following = self.decode(following)
                items.append(item)
            return items, following

        obj = {}
        for _ in range(count):
            key_offset = following
            key, following = self.decode(following)
            if isinstance(key, (list, dict)):
                key = self.dumps(key_offset)
            obj[key], following = self.decode(following)
        return obj, following


def _decode_string(raw: bytes) -> str:
    """Interpret the escape sequences of a stored string."""
    text = raw.decode('latin-1')
    if '\\' not in text:
        return text
    try:
        return json_module.loads('"' + text + '"', strict=False)
    except ValueError:
        # Not a valid JSON escape sequence; keep the characters as written
        return text


# ---------------------------------------------------------------------------
# MODULE LEVEL HELPERS
# ---------------------------------------------------------------------------

def skip(buffer: bytes, offset: int = 0) -> int:
    """Return the offset following the value at offset."""
    return BufferWalker(buffer).skip(offset)


def render(buffer: bytes, out: IO[str], offset: int = 0) -> int:
    """Write the value at offset to out and return the following offset."""
    return BufferWalker(buffer).render(out, offset)


def dumps(buffer: bytes, offset: int = 0) -> str:
    """Return the JSON text of the value at offset."""
    return BufferWalker(buffer).dumps(offset)


def to_python(buffer: bytes, offset: int = 0) -> Any:
    """Return the value at offset as plain Python objects."""
    return BufferWalker(buffer).decode(offset)[0]


def dump_words(buffer: bytes, out: IO[str]) -> None:
    """Write one line per word: offset and hexadecimal value."""
    width = 2 * WORD_SIZE
    for offset, word in BufferWalker(buffer).words():
        out.write(f"{offset:8d}: {word:0{width}x}\n")
