import gzip

import pytest

from flyweight.encoding import ContentEncoding, EncodingParseError


def test_encoding_basic_parsing():
    assert ContentEncoding.parse("gzip") is ContentEncoding.GZIP
    with pytest.raises(EncodingParseError):
        ContentEncoding.parse("not_gzip")


def test_encoding_parsing_from_header_value():
    assert ContentEncoding.from_header("gzip") is ContentEncoding.GZIP
    assert ContentEncoding.from_header("deflate, gzip") is ContentEncoding.GZIP
    assert ContentEncoding.from_header("br, lorem, gzip, ipsum") is ContentEncoding.GZIP
    assert ContentEncoding.from_header("br, lorem, ipsum") is None
    with pytest.raises(EncodingParseError):
        ContentEncoding.parse("")
    assert ContentEncoding.from_header("deflate") is None


def test_parse_error_message_names_input():
    with pytest.raises(EncodingParseError) as info:
        ContentEncoding.parse("br")
    assert info.value.found == "br"
    assert str(info.value) == (
        "Only gzip supported. Proposed encoding schemes received: br"
    )


def test_str_is_scheme_name():
    assert str(ContentEncoding.parse("gzip")) == "gzip"


def test_from_header_empty_value():
    assert ContentEncoding.from_header("") is None


@pytest.mark.parametrize("body", [b"", b"hello", b"compressed_content" * 50, bytes(range(256))])
def test_gzip_round_trip(body):
    encoded = ContentEncoding.GZIP.encode_body(body)
    assert gzip.decompress(encoded) == body


def test_gzip_output_has_magic_header():
    encoded = ContentEncoding.GZIP.encode_body(b"test")
    assert encoded[:2] == b"\x1f\x8b"