"""
Parse Context - State shared by every grammar handler during one parse.

A context is created right before a parse, filled in by the parser, and
read by the caller right after it: the encoded buffer, the character that
followed the parsed value, and the error code.
"""

from typing import Optional

from .buffers import WordBuffer
from .errors import ErrorCode
from .handler import END, CharacterSource, as_source


class ParseContext:
    """
    Holds the state of one parse.

    `last` is the current character: every handler is entered with the
    first character of its production in `last` and leaves the first
    character after its production there.
    """

    def __init__(self, source, writer: Optional[WordBuffer] = None):
        self.source: CharacterSource = as_source(source)
        self.writer = writer if writer is not None else WordBuffer()
        self.last: int = END
        self.error: ErrorCode = ErrorCode.NONE
        self.depth: int = 0
        self.buffer: Optional[bytes] = None

    def read(self) -> int:
        """Read the next character into `last`."""
        self.last = self.source()
        return self.last

    def reset(self) -> None:
        """Prepare for the next value, keeping the source and `last`."""
        self.error = ErrorCode.NONE
        self.depth = 0
        self.buffer = None
        self.writer.release()

    @property
    def ok(self) -> bool:
        return self.error == ErrorCode.NONE

    def __repr__(self) -> str:
        return f"ParseContext(error={self.error.name}, last={self.last}, {len(self.writer)} words)"
