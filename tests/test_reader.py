"""Test rendering, skipping and decoding of encoded buffers."""

import io

import pytest

from wordjson import BufferWalker, CorruptBufferError, dumps, parse, render, skip, to_python
from wordjson.layout import DOUBLE_WORDS, WORD, Tag
from wordjson.reader import dump_words, format_number


@pytest.mark.parametrize("text", [
    "null",
    "-0.5e10",
    '"hello"',
    "[1,2,3]",
    "{}",
    '{"a":1,"b":[true,false,null],"c":{"d":"e"}}',
    '[[[["deep"]]], {"k": [1, {"x": ""}]}]',
])
def test_skip_consumes_whole_buffer(text):
    result = parse(text)
    assert skip(result.buffer) == result.words


def test_skip_over_subtree():
    buffer = parse('[[1,2],"xyz",null]').buffer
    walker = BufferWalker(buffer)

    nested = 2
    after_nested = walker.skip(nested)
    assert after_nested == nested + 2 + 2 * (1 + DOUBLE_WORDS)

    after_string = walker.skip(after_nested)
    assert walker.decode(after_nested)[0] == "xyz"
    assert walker.decode(after_string)[0] is None
    assert walker.skip(after_string) == walker.size


def test_skip_object_pairs():
    buffer = parse('{"a":[1,2],"b":"c"}').buffer
    walker = BufferWalker(buffer)
    key_a = 2
    value_a = walker.skip(key_a)
    key_b = walker.skip(value_a)
    assert walker.decode(key_b)[0] == "b"


class TestRender:
    """render writes compact JSON text."""

    @pytest.mark.parametrize("text,expected", [
        (" [ 1 , 2 ,3 ] ", "[1,2,3]"),
        ('{ "a" : true , "b" : null }', '{"a":true,"b":null}'),
        ("[]", "[]"),
        ("{}", "{}"),
        ("-0.5e10", "-5000000000"),
        ("0.1", "0.1"),
        ('"a\\nb"', '"a\\nb"'),
        ("[false,[{}]]", "[false,[{}]]"),
    ])
    def test_render_text(self, text, expected):
        assert dumps(parse(text).buffer) == expected

    def test_render_returns_following_offset(self):
        result = parse('{"x":[1]}')
        out = io.StringIO()
        assert render(result.buffer, out) == result.words
        assert out.getvalue() == '{"x":[1]}'

    def test_render_sibling_values(self):
        first = parse("[1,2]").buffer
        second = parse('"two"').buffer
        walker = BufferWalker(first + second)
        out = io.StringIO()

        following = walker.render(out)
        out.write(" ")
        end = walker.render(out, following)

        assert out.getvalue() == '[1,2] "two"'
        assert end == walker.size


class TestFormatNumber:
    @pytest.mark.parametrize("value,text", [
        (1.0, "1"),
        (-3.0, "-3"),
        (0.0, "0"),
        (-0.0, "-0"),
        (0.5, "0.5"),
        (1e20, "1e+20"),
        (1.5e-07, "1.5e-07"),
        (float("inf"), "1e999"),
        (float("-inf"), "-1e999"),
    ])
    def test_format(self, value, text):
        assert format_number(value) == text

    def test_large_integers_keep_precision(self):
        value = 12345678901234567890.0
        assert float(format_number(value)) == value


class TestDecode:
    def test_decode_plain_values(self):
        text = '{"name":"x","tags":["a","b"],"n":-1.5,"ok":true,"none":null}'
        assert to_python(parse(text).buffer) == {
            "name": "x", "tags": ["a", "b"], "n": -1.5, "ok": True, "none": None,
        }

    def test_decode_interprets_escapes(self):
        assert to_python(parse(r'"tab\there A \/"').buffer) == "tab\there A /"

    def test_decode_keeps_invalid_escape_as_written(self):
        assert to_python(parse(r'"bad \q escape"').buffer) == "bad \\q escape"

    def test_decode_unhashable_key_uses_text(self):
        buffer = parse('{[1]:2}', string_keys=False).buffer
        assert to_python(buffer) == {"[1]": 2.0}

    def test_decode_returns_following_offset(self):
        result = parse("[1,[2]]")
        assert BufferWalker(result.buffer).decode() == ([1.0, [2.0]], result.words)


class TestCorruptBuffers:
    """Invalid buffers raise CorruptBufferError from every traversal."""

    def test_invalid_tag(self):
        buffer = WORD.pack(9)
        with pytest.raises(CorruptBufferError) as ei:
            dumps(buffer)
        assert ei.value.offset == 0
        with pytest.raises(CorruptBufferError):
            skip(buffer)

    def test_invalid_tag_inside_array(self):
        buffer = WORD.pack(Tag.ARRAY) + WORD.pack(2) + WORD.pack(Tag.NULL) + WORD.pack(77)
        with pytest.raises(CorruptBufferError) as ei:
            to_python(buffer)
        assert ei.value.offset == 3

    def test_count_past_end(self):
        buffer = WORD.pack(Tag.ARRAY) + WORD.pack(2) + WORD.pack(Tag.TRUE)
        with pytest.raises(CorruptBufferError):
            skip(buffer)

    def test_truncated_number(self):
        buffer = WORD.pack(Tag.NUMBER)
        with pytest.raises(CorruptBufferError):
            skip(buffer)
        with pytest.raises(CorruptBufferError):
            dumps(buffer)

    def test_unterminated_string(self):
        buffer = WORD.pack(Tag.STRING) + b'abcd'
        with pytest.raises(CorruptBufferError):
            skip(buffer)

    def test_partial_word(self):
        with pytest.raises(CorruptBufferError):
            BufferWalker(b'\x00\x00')

    def test_corrupt_error_is_value_error(self):
        assert issubclass(CorruptBufferError, ValueError)


def test_dump_words_lists_every_word():
    result = parse("[null]")
    out = io.StringIO()
    dump_words(result.buffer, out)
    lines = out.getvalue().splitlines()
    assert len(lines) == result.words
    assert lines[0].split() == ["0:", format(Tag.ARRAY, "08x")]
    assert lines[1].split() == ["1:", format(1, "08x")]
