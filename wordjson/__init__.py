"""
wordjson - A streaming JSON parser that encodes into a flat buffer of words.
"""

from .errors import CorruptBufferError, ErrorCode, ParseError
from .handler import END, CallableSource, CharacterSource, StreamSource, StringSource
from .layout import Tag, WORD_SIZE
from .parser import ParseResult, StreamParser, iterparse, parse
from .reader import BufferWalker, dumps, render, skip, to_python

__all__ = [
    'BufferWalker',
    'CallableSource',
    'CharacterSource',
    'CorruptBufferError',
    'END',
    'ErrorCode',
    'ParseError',
    'ParseResult',
    'StreamParser',
    'StreamSource',
    'StringSource',
    'Tag',
    'WORD_SIZE',
    'dumps',
    'iterparse',
    'parse',
    'render',
    'skip',
    'to_python',
]
__version__ = '0.1.0'
