r"""
Buffers - Manages the growable output buffer.

The parser appends encoded words to a WordBuffer. Every reservation grows
the buffer by exactly the number of words requested, so the buffer never
holds unused space and its size is always the number of words written.
"""

from typing import Optional

from .layout import DOUBLE, WORD, WORD_SIZE


class WordBuffer:
    """
    Growable buffer of fixed-width words.

    `max_words` caps the total allocation; a reservation past the cap
    fails with MemoryError just like a real allocation failure.
    """

    def __init__(self, max_words: Optional[int] = None):
        self._data: Optional[bytearray] = None
        self._size: int = 0
        self._max_words = max_words

    @property
    def size(self) -> int:
        """Number of words allocated."""
        return self._size

    @property
    def allocated(self) -> bool:
        """True while the buffer holds memory."""
        return self._data is not None

    def reserve(self, count: int) -> int:
        """
        Grow the buffer by count words and return the offset of the new region.

        The new words are zero-filled; existing words keep their offsets.
        """
        if self._max_words is not None and self._size + count > self._max_words:
            raise MemoryError(f"cannot grow buffer of {self._size} words by {count}")
        if self._data is None:
            self._data = bytearray(count * WORD_SIZE)
        else:
            self._data.extend(bytes(count * WORD_SIZE))
        offset = self._size
        self._size += count
        return offset

    def put_word(self, offset: int, value: int) -> None:
        """Store an unsigned word at offset."""
        WORD.pack_into(self._data, offset * WORD_SIZE, value)

    def get_word(self, offset: int) -> int:
        """Read back the word at offset."""
        return WORD.unpack_from(self._data, offset * WORD_SIZE)[0]

    def increment(self, offset: int) -> None:
        """Add one to the word at offset."""
        self.put_word(offset, self.get_word(offset) + 1)

    def put_double(self, offset: int, value: float) -> None:
        """Store a double starting at offset."""
        DOUBLE.pack_into(self._data, offset * WORD_SIZE, value)

    def put_bytes(self, offset: int, data: bytes) -> None:
        """Copy raw bytes starting at offset."""
        start = offset * WORD_SIZE
        self._data[start:start + len(data)] = data

    def release(self) -> None:
        """Drop every word written so far."""
        self._data = None
        self._size = 0

    def detach(self) -> bytes:
        """Hand the finished buffer to the caller and empty the writer."""
        data = bytes(self._data) if self._data is not None else b''
        self.release()
        return data

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"WordBuffer({self._size} words)"
