import pytest

from flyweight.http_commons import HttpVersion, HttpVersionParseError


@pytest.mark.parametrize(
    "text, expected",
    [("HTTP/1.1", HttpVersion.HTTP11), ("HTTP/2", HttpVersion.HTTP2)],
)
def test_parse_known_versions(text, expected):
    assert HttpVersion.parse(text) is expected


@pytest.mark.parametrize("version", list(HttpVersion))
def test_str_round_trips(version):
    assert HttpVersion.parse(str(version)) is version


def test_str_is_wire_form():
    assert str(HttpVersion.parse("HTTP/1.1")) == "HTTP/1.1"
    assert f"{HttpVersion.parse('HTTP/2')}" == "HTTP/2"


@pytest.mark.parametrize("text", ["HTTP/1.0", "http/1.1", "", "HTTP/3", " HTTP/1.1"])
def test_parse_rejects_unknown(text):
    with pytest.raises(HttpVersionParseError) as info:
        HttpVersion.parse(text)
    assert info.value.found == text


def test_parse_error_is_value_error():
    with pytest.raises(ValueError):
        HttpVersion.parse("HTTP/0.9")