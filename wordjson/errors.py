"""
Errors raised while parsing text or walking an encoded buffer.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Parse error codes, one per grammar production that can fail."""

    NONE = 0
    MEMORY = 1
    VALUE = 2
    NULL = 3
    FALSE = 4
    TRUE = 5
    NUMBER = 6
    NUMBER_TOO_LONG = 7
    EOS_INSIDE_STRING = 8
    COMMA = 9
    COLON = 10
    CLOSED_BRACKET = 11
    KEY = 12
    DEPTH = 13
    STRING_NUL = 14
    CHARACTER = 15


_MESSAGES = {
    ErrorCode.NONE: "no error",
    ErrorCode.MEMORY: "out of memory",
    ErrorCode.VALUE: "unrecognized value",
    ErrorCode.NULL: "malformed null literal",
    ErrorCode.FALSE: "malformed false literal",
    ErrorCode.TRUE: "malformed true literal",
    ErrorCode.NUMBER: "malformed number",
    ErrorCode.NUMBER_TOO_LONG: "number too long",
    ErrorCode.EOS_INSIDE_STRING: "end of input inside string",
    ErrorCode.COMMA: "expected ',' between object members",
    ErrorCode.COLON: "expected ':' after object key",
    ErrorCode.CLOSED_BRACKET: "expected ',' or ']' in array",
    ErrorCode.KEY: "object key must be a string",
    ErrorCode.DEPTH: "nesting too deep",
    ErrorCode.STRING_NUL: "NUL character inside string",
    ErrorCode.CHARACTER: "character code outside the byte range",
}


def describe(code: ErrorCode) -> str:
    """Return a human readable description of an error code."""
    return _MESSAGES[code]


def format_char(char: int) -> str:
    """Render a character code for diagnostics ("end of input" for END)."""
    if char < 0:
        return "end of input"
    return repr(chr(char))


class ParseError(ValueError):
    """
    Raised when the input is not a valid value.

    Attributes:
        code: The ErrorCode of the failed production.
        last: The last character read from the source (negative at end of input).
    """

    def __init__(self, code: ErrorCode, last: int):
        self.code = ErrorCode(code)
        self.last = last
        super().__init__(f"{describe(self.code)} near {format_char(last)}")


class CorruptBufferError(ValueError):
    """Raised when an encoded buffer holds an invalid tag or is truncated."""

    def __init__(self, message: str, offset: int):
        self.offset = offset
        super().__init__(f"{message} at word {offset}")
