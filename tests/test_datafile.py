import pytest

from huisserver.datafile import DataFile, expand_id


@pytest.fixture
def data(tmp_path):
    (tmp_path / "Overige").mkdir()
    (tmp_path / "Overige" / "lines.txt").write_bytes(b"first\r\nsecond\nthird\r\nfourth")
    return DataFile(tmp_path)


def test_read_lines_in_order(data):
    data.open("Overige/lines.txt")
    assert [data.read_line() for _ in range(4)] == ["first", "second", "third", "fourth"]
    assert data.read_line() == ""


def test_read_line_at_skips_lines(data):
    data.open("Overige/lines.txt")
    assert data.read_line_at(2) == "third"
    assert data.read_line_at(0) == "fourth"


def test_read_line_at_rejects_negative(data):
    data.open("Overige/lines.txt")
    with pytest.raises(ValueError):
        data.read_line_at(-1)


def test_open_rewinds(data):
    data.open("Overige/lines.txt")
    data.read_line()
    data.open("Overige/lines.txt")
    assert data.read_line() == "first"


def test_contents_stop_at_nul(tmp_path):
    (tmp_path / "f.txt").write_bytes(b"abc\0def")
    data = DataFile(tmp_path)
    data.open("f.txt")
    assert data.contents() == "abc"


def test_missing_file_raises(data):
    with pytest.raises(FileNotFoundError):
        data.open("Overige/missing.txt")


def test_expand_id_replaces_marker():
    assert expand_id("a!!IDb!!ID", "42") == "a42b42"


@pytest.mark.parametrize("text", ["!x", "!!x", "!!Ix", "!!!ID", "plain"])
def test_expand_id_keeps_broken_markers(text):
    assert expand_id(text, "42") == text


def test_expand_id_drops_trailing_partial_marker():
    assert expand_id("ab!", "42") == "ab"
    assert expand_id("ab!!I", "42") == "ab"


def test_expand_id_stops_at_nul():
    assert expand_id("ab\0!!ID", "42") == "ab"