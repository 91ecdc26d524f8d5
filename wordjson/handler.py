"""
Character Sources - Suppliers of one character per call.

The parser pulls characters from a source one at a time. A source returns
a character code (0-255) or END once the input is exhausted or unreadable.
Clients can subclass CharacterSource or pass any zero-argument callable.
"""

import logging
from typing import IO, Callable, Optional, Union

logger = logging.getLogger(__name__)

END = -1


class CharacterSource:
    """
    Base class for character sources.
    Clients should subclass this and override get().
    """

    def get(self) -> int:
        """Return the next character code, or END when there is no more input."""
        return END

    def __call__(self) -> int:
        return self.get()


class StringSource(CharacterSource):
    """
    Read characters from an in-memory string.

    Text must be ASCII. Bytes are taken verbatim, so bytes above 0x7F
    reach the parser as raw character codes.
    """

    def __init__(self, text: Union[str, bytes]):
        if isinstance(text, str):
            text = text.encode('ascii')
        self._data = bytes(text)
        self._pos = 0

    @property
    def position(self) -> int:
        """Number of characters consumed so far."""
        return self._pos

    def get(self) -> int:
        if self._pos >= len(self._data):
            return END
        char = self._data[self._pos]
        self._pos += 1
        return char


class StreamSource(CharacterSource):
    """
    Read characters one at a time from a binary or text file object.

    A read failure is kept in `error` and reported to the parser as END.
    Every character read is also written to `echo` when one is given.
    """

    def __init__(self, stream: IO, echo: Optional[IO[str]] = None):
        self._stream = stream
        self._echo = echo
        self.error: Optional[OSError] = None

    def get(self) -> int:
        if self.error is not None:
            return END
        try:
            chunk = self._stream.read(1)
        except OSError as exc:
            logger.warning("read failed on %r: %s", self._stream, exc)
            self.error = exc
            return END
        if not chunk:
            return END
        char = chunk[0] if isinstance(chunk, bytes) else ord(chunk)
        if self._echo is not None:
            self._echo.write(chr(char))
        return char


class CallableSource(CharacterSource):
    """Adapt a zero-argument function returning character codes."""

    def __init__(self, func: Callable[[], int]):
        self._func = func

    def get(self) -> int:
        char = self._func()
        if char < 0:
            return END
        return char


def as_source(obj) -> CharacterSource:
    """Wrap a string, bytes, file object or callable as a CharacterSource."""
    if isinstance(obj, CharacterSource):
        return obj
    if isinstance(obj, (str, bytes, bytearray)):
        return StringSource(obj)
    if hasattr(obj, 'read'):
        return StreamSource(obj)
    if callable(obj):
        return CallableSource(obj)
    raise TypeError(f"cannot read characters from {type(obj).__name__}")
