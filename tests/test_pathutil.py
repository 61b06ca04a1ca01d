import pytest

from zgbtools.pathutil import (
    byte_to_binary,
    get_filename_from_path,
    get_path_without_filename,
    matches_extension,
    read_file,
    remove_extension,
    replace_extension,
    replace_path,
    write_file,
)


def test_get_filename_from_path():
    assert get_filename_from_path("a/b/c.txt") == "c.txt"
    assert get_filename_from_path("c.txt") == "c.txt"
    assert get_filename_from_path("/c") == "/c"


def test_remove_extension():
    assert remove_extension("dir/file.tar.gz") == "dir/file.tar"
    assert remove_extension("file") == "file"


def test_replace_extension():
    assert replace_extension("song.sav", ".h") == "song.h"
    assert replace_extension("song.sav", "c") == "song.c"
    assert replace_extension("song", ".c") == "song.c"


def test_replace_path():
    assert replace_path("in/x.c", "out/") == "out/x.c"
    assert replace_path("x.c", "out/") == "out/x.c"


def test_get_path_without_filename():
    assert get_path_without_filename("a/b/c.txt") == "a/b/"
    assert get_path_without_filename("c.txt") == ""


def test_path_split_invariant():
    path = "one/two/three.sav"
    assert get_path_without_filename(path) + get_filename_from_path(path) == path


def test_matches_extension():
    assert matches_extension("FILE.SAV", ".sav") is True
    assert matches_extension("file.gbr", ".sav") is False
    assert matches_extension("a", ".sav") is False


def test_byte_to_binary_values():
    assert byte_to_binary(0b01000100) == "01000100"
    assert byte_to_binary(7) == "00000111"
    assert byte_to_binary(0x1FF) == "11111111"


@pytest.mark.parametrize("value", range(256))
def test_byte_to_binary_round_trip(value):
    text = byte_to_binary(value)
    assert len(text) == 8
    assert int(text, 2) == value


def test_file_round_trip(tmp_path):
    target = tmp_path / "blob.bin"
    payload = bytes(range(256))
    write_file(str(target), payload)
    assert read_file(str(target)) == payload


def test_read_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_file(str(tmp_path / "missing.bin"))


def test_write_into_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        write_file(str(tmp_path / "nope" / "out.bin"), b"x")