import pytest

from tex_check.symbols import (
    At,
    BeginEnd,
    Brace,
    Bracket,
    Chevron,
    Delimiter,
    Dollar,
    Other,
    Paren,
    StartStop,
    classify_delimiter,
    decode_bytes,
    display_text,
    encode_text,
)


@pytest.mark.parametrize(
    ("symbol", "opening", "closing"),
    [
        (Brace(), "{", "}"),
        (Bracket(), "[", "]"),
        (Paren(), "(", ")"),
        (Chevron(), "<", ">"),
        (Dollar(), "$", "$"),
        (At(), "@", "@"),
        (Delimiter(), "\\left", "\\right"),
        (StartStop("itemize"), "\\startitemize", "\\stopitemize"),
        (BeginEnd("figure"), "\\begin{figure}", "\\end{figure}"),
        (Other(ord("|")), "|", "|"),
    ],
)
def test_symbol_spellings(symbol, opening: str, closing: str):
    assert symbol.opening == opening
    assert symbol.closing == closing


def test_symbols_compare_variant_and_payload():
    assert Brace() == Brace()
    assert StartStop("itemize") == StartStop("itemize")
    assert StartStop("itemize") != StartStop("enumerate")
    assert BeginEnd("itemize") != StartStop("itemize")
    assert Brace() != Bracket()


def test_symbols_with_same_spelling_are_still_distinct():
    assert Other(ord("$")) != Dollar()
    assert Other(ord("@")) != At()
    assert Other(ord("{")) != Brace()


def test_symbols_are_hashable():
    assert len({Brace(), Brace(), StartStop("a"), StartStop("a"), StartStop("b")}) == 3


@pytest.mark.parametrize(
    ("delimiter", "expected"),
    [
        ("{", Brace()),
        ("}", Brace()),
        ("[", Bracket()),
        ("]", Bracket()),
        ("(", Paren()),
        (")", Paren()),
        ("<", Chevron()),
        (">", Chevron()),
        ("|", Other(ord("|"))),
        ("+", Other(ord("+"))),
        ("$", Other(ord("$"))),
    ],
)
def test_classify_delimiter(delimiter: str, expected):
    assert classify_delimiter(ord(delimiter)) == expected


def test_other_symbol_round_trips_non_ascii_byte():
    symbol = classify_delimiter(0xE9)

    assert symbol == Other(0xE9)
    assert encode_text(symbol.closing) == b"\xe9"


def test_decode_bytes_keeps_utf8_text():
    assert decode_bytes("théorème".encode("utf-8")) == "théorème"
    assert encode_text(decode_bytes(b"\xff\xfe")) == b"\xff\xfe"


def test_display_text_escapes_undecodable_bytes():
    assert display_text(decode_bytes(b"caf\xe9")) == "caf\\xe9"
    assert display_text("théorème") == "théorème"
