import pytest

from lexer import InvalidCharacter, Lexer
from source import SourceNotFound, decode_source


def test_decodes_utf8(tmp_path):
    path = tmp_path / "hola.lw"
    path.write_bytes("quéweá chúpala".encode("utf-8"))
    source = decode_source(str(path))
    assert source.text == "quéweá chúpala"
    assert len(source) == 14
    assert list(source)[2] == "é"
    assert source.filename == str(path)


def test_byte_order_mark_is_dropped(tmp_path):
    path = tmp_path / "bom.lw"
    path.write_bytes(b"\xef\xbb\xbf" + "weón".encode("utf-8"))
    assert decode_source(str(path)).text == "weón"


def test_missing_file(tmp_path):
    missing = str(tmp_path / "nope.lw")
    with pytest.raises(SourceNotFound) as excinfo:
        decode_source(missing)
    assert excinfo.value.filename == missing
    assert str(excinfo.value).startswith(f"Failed to read {missing}")


def test_undecodable_bytes_fail_in_the_lexer(tmp_path):
    path = tmp_path / "latin1.lw"
    path.write_bytes("weón".encode("latin-1"))
    source = decode_source(str(path))
    with pytest.raises(InvalidCharacter) as excinfo:
        Lexer(source.text, source.filename).tokenize()
    assert excinfo.value.char == "\ufffd"
    assert excinfo.value.column == 3
