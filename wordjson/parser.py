"""
Stream Parser - Recursive-descent parser that encodes while it parses.

Each grammar production has one handler. Handlers pull characters from the
context's source and append encoded words to the context's writer, so the
text is turned into the binary encoding in a single pass without building
any intermediate tree.
"""

import logging
from typing import Iterator, NamedTuple, Optional

from .buffers import WordBuffer
from .context import ParseContext
from .errors import ErrorCode, ParseError
from .handler import END
from .layout import DOUBLE_WORDS, Tag, WORD_SIZE, align

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
NUMBER_BUFFER_SIZE = 128     # a numeral must be shorter than this
DEPTH_LIMIT_DEFAULT = 256    # nested arrays/objects, kept under the recursion limit

WHITESPACE = frozenset(b' \t\n\r')
LITERAL_FOLLOWERS = frozenset(b' \t\n\r]},:')
NUMBER_CHARS = frozenset(b'0123456789.+-eE')

QUOTE = ord('"')
BACKSLASH = ord('\\')
COMMA = ord(',')
COLON = ord(':')
OPEN_BRACKET = ord('[')
CLOSE_BRACKET = ord(']')
OPEN_BRACE = ord('{')
CLOSE_BRACE = ord('}')


class ParseResult(NamedTuple):
    """An encoded value and the character that followed it in the source."""

    buffer: bytes
    last: int

    @property
    def words(self) -> int:
        """Length of the buffer in words."""
        return len(self.buffer) // WORD_SIZE


class StreamParser:
    """
    Parse one value at a time from a character source.

    Args:
        max_depth: Maximum nesting of arrays and objects.
        string_keys: Reject object keys that are not strings.
        max_words: Allocation ceiling for the output buffer, in words.
    """

    def __init__(self, max_depth: int = DEPTH_LIMIT_DEFAULT, string_keys: bool = True,
                 max_words: Optional[int] = None):
        self.max_depth = max_depth
        self.string_keys = string_keys
        self.max_words = max_words

        self._dispatch = {
            OPEN_BRACKET: self._array,
            OPEN_BRACE: self._object,
            QUOTE: self._string,
            ord('-'): self._number,
            ord('f'): self._false,
            ord('n'): self._null,
            ord('t'): self._true,
        }
        for digit in b'0123456789':
            self._dispatch[digit] = self._number

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    def context(self, source) -> ParseContext:
        """Create a context reading from source with this parser's allocation ceiling."""
        return ParseContext(source, WordBuffer(self.max_words))

    def run(self, context: ParseContext, resume: bool = False) -> Optional[bytes]:
        """
        Parse one value into context.

        On success the encoded buffer is returned and stored in
        context.buffer. On failure the partial buffer is released,
        context.error holds the error code and None is returned.

        With resume=True parsing starts from context.last instead of
        reading a fresh character, so consecutive values can be read
        from the same source.
        """
        context.reset()
        try:
            if not resume or context.last in WHITESPACE:
                self._skip_whitespace(context)
            self._value(context)
        except ParseError as exc:
            context.writer.release()
            context.error = exc.code
            logger.debug("parse failed: %s", exc)
            return None
        except MemoryError:
            context.writer.release()
            context.error = ErrorCode.MEMORY
            logger.debug("parse failed: out of memory near character %d", context.last)
            return None
        except RecursionError:
            # max_depth set above what the interpreter stack can hold
            context.writer.release()
            context.error = ErrorCode.DEPTH
            logger.debug("parse failed: recursion limit reached at depth %d", context.depth)
            return None
        except BaseException:
            context.writer.release()
            raise
        context.buffer = context.writer.detach()
        return context.buffer

    def parse(self, source) -> ParseResult:
        """
        Parse exactly one value from source.

        Leading whitespace is skipped; whatever follows the value is left
        for the caller in ParseResult.last.

        Raises:
            ParseError: if the input is not a valid value.
        """
        context = self.context(source)
        buffer = self.run(context)
        if buffer is None:
            raise ParseError(context.error, context.last)
        return ParseResult(buffer, context.last)

    def iterparse(self, source) -> Iterator[ParseResult]:
        """Parse whitespace-separated values until the source is exhausted."""
        context = self.context(source)
        self._skip_whitespace(context)
        while context.last != END:
            buffer = self.run(context, resume=True)
            if buffer is None:
                raise ParseError(context.error, context.last)
            yield ParseResult(buffer, context.last)

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _skip_whitespace(self, ctx: ParseContext) -> int:
        """Read characters until one is not whitespace."""
        while ctx.read() in WHITESPACE:
            pass
        return ctx.last

    def _reserve(self, ctx: ParseContext, count: int) -> int:
        try:
            return ctx.writer.reserve(count)
        except MemoryError:
            raise ParseError(ErrorCode.MEMORY, ctx.last) from None

    def _enter(self, ctx: ParseContext) -> None:
        if ctx.depth >= self.max_depth:
            raise ParseError(ErrorCode.DEPTH, ctx.last)
        ctx.depth += 1

    # ========================================================================
    # GRAMMAR HANDLERS
    # Each handler is entered with the first character of its production in
    # ctx.last and leaves the first non-blank character after it there.
    # ========================================================================

    def _value(self, ctx: ParseContext) -> None:
        handler = self._dispatch.get(ctx.last)
        if handler is None:
            raise ParseError(ErrorCode.VALUE, ctx.last)
        handler(ctx)

    def _literal(self, ctx: ParseContext, rest: bytes, tag: Tag, code: ErrorCode) -> None:
        for expected in rest:
            if ctx.read() != expected:
                raise ParseError(code, ctx.last)
        follower = ctx.read()
        if follower != END and follower not in LITERAL_FOLLOWERS:
            raise ParseError(code, follower)
        offset = self._reserve(ctx, 1)
        ctx.writer.put_word(offset, tag)
        if follower in WHITESPACE:
            self._skip_whitespace(ctx)

    def _null(self, ctx: ParseContext) -> None:
        self._literal(ctx, b'ull', Tag.NULL, ErrorCode.NULL)

    def _true(self, ctx: ParseContext) -> None:
        self._literal(ctx, b'rue', Tag.TRUE, ErrorCode.TRUE)

    def _false(self, ctx: ParseContext) -> None:
        self._literal(ctx, b'alse', Tag.FALSE, ErrorCode.FALSE)

    def _number(self, ctx: ParseContext) -> None:
        scratch = bytearray([ctx.last])
        while ctx.read() in NUMBER_CHARS:
            scratch.append(ctx.last)
            if len(scratch) >= NUMBER_BUFFER_SIZE:
                raise ParseError(ErrorCode.NUMBER_TOO_LONG, ctx.last)
        try:
            value = float(scratch.decode('ascii'))
        except ValueError:
            raise ParseError(ErrorCode.NUMBER, ctx.last) from None

        offset = self._reserve(ctx, 1 + DOUBLE_WORDS)
        ctx.writer.put_word(offset, Tag.NUMBER)
        ctx.writer.put_double(offset + 1, value)
        if ctx.last in WHITESPACE:
            self._skip_whitespace(ctx)

    def _string_char(self, ctx: ParseContext) -> int:
        char = ctx.read()
        if char == END:
            raise ParseError(ErrorCode.EOS_INSIDE_STRING, char)
        if char == 0:
            raise ParseError(ErrorCode.STRING_NUL, char)
        if char > 0xFF:
            raise ParseError(ErrorCode.CHARACTER, char)
        return char

    def _string(self, ctx: ParseContext) -> None:
        offset = self._reserve(ctx, 1)
        ctx.writer.put_word(offset, Tag.STRING)

        # Escapes are kept as written; a backslash only protects the next character.
        scratch = bytearray()
        while True:
            char = self._string_char(ctx)
            if char == QUOTE:
                break
            scratch.append(char)
            if char == BACKSLASH:
                scratch.append(self._string_char(ctx))
        scratch.append(0)

        offset = self._reserve(ctx, align(len(scratch)))
        ctx.writer.put_bytes(offset, scratch)
        self._skip_whitespace(ctx)

    def _array(self, ctx: ParseContext) -> None:
        self._enter(ctx)
        offset = self._reserve(ctx, 2)
        ctx.writer.put_word(offset, Tag.ARRAY)
        ctx.writer.put_word(offset + 1, 0)
        count = offset + 1

        if self._skip_whitespace(ctx) != CLOSE_BRACKET:
            while True:
                ctx.writer.increment(count)
                self._value(ctx)
                if ctx.last != COMMA:
                    break
                if self._skip_whitespace(ctx) == CLOSE_BRACKET:
                    raise ParseError(ErrorCode.CLOSED_BRACKET, ctx.last)
            if ctx.last != CLOSE_BRACKET:
                raise ParseError(ErrorCode.CLOSED_BRACKET, ctx.last)

        ctx.depth -= 1
        self._skip_whitespace(ctx)

    def _object(self, ctx: ParseContext) -> None:
        self._enter(ctx)
        offset = self._reserve(ctx, 2)
        ctx.writer.put_word(offset, Tag.OBJECT)
        ctx.writer.put_word(offset + 1, 0)
        count = offset + 1

        if self._skip_whitespace(ctx) != CLOSE_BRACE:
            while True:
                ctx.writer.increment(count)
                self._key(ctx)
                if ctx.last != COLON:
                    raise ParseError(ErrorCode.COLON, ctx.last)
                self._skip_whitespace(ctx)
                self._value(ctx)
                if ctx.last == CLOSE_BRACE:
                    break
                if ctx.last != COMMA:
                    raise ParseError(ErrorCode.COMMA, ctx.last)
                self._skip_whitespace(ctx)

        ctx.depth -= 1
        self._skip_whitespace(ctx)

    def _key(self, ctx: ParseContext) -> None:
        if self.string_keys and ctx.last != QUOTE:
            raise ParseError(ErrorCode.KEY, ctx.last)
        self._value(ctx)


def parse(source, **options) -> ParseResult:
    """Parse one value from source. See StreamParser for the options."""
    return StreamParser(**options).parse(source)


def iterparse(source, **options) -> Iterator[ParseResult]:
    """Parse a sequence of whitespace-separated values from source."""
    return StreamParser(**options).iterparse(source)
