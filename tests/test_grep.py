import io
import contextlib

import pytest

from unixtools.errors import EXIT_ERROR, EXIT_FAILURE, EXIT_SUCCESS, PatternError
from unixtools import grep as grep_module
from unixtools.grep import GrepOptions, compile_pattern, grep, match_lines, matches
from unixtools.sources import open_source


@pytest.fixture
def files(tmp_path):
    first = tmp_path / "first.txt"
    first.write_text("abc\nac\nabbc\n")
    second = tmp_path / "second.txt"
    second.write_text("nothing here\nABC\n")
    return str(first), str(second)


def run_grep(pattern, paths, **kwargs):
    out, err = io.StringIO(), io.StringIO()
    ignore_case = kwargs.pop("ignore_case", False)
    status = grep(
        compile_pattern(pattern, ignore_case=ignore_case),
        paths,
        GrepOptions(**kwargs),
        out=out,
        err=err,
    )
    return status, out.getvalue(), err.getvalue()


def test_match_lines_selects_matching_lines():
    regex = compile_pattern("ab+c")
    assert list(match_lines(["abc", "ac", "abbc"], regex)) == [(1, "abc"), (3, "abbc")]


def test_match_lines_invert():
    regex = compile_pattern("ab+c")
    assert list(match_lines(["abc\n", "ac\n", "abbc\n"], regex, invert=True)) == [
        (2, "ac")
    ]


def test_matches_searches_anywhere_in_line():
    regex = compile_pattern("b+")
    assert matches(regex, "xxbxx")
    assert not matches(regex, "xxx")


def test_malformed_pattern():
    with pytest.raises(PatternError) as excinfo:
        compile_pattern("a(b")
    assert excinfo.value.pattern == "a(b"
    assert "missing )" in excinfo.value.message


def test_single_file(files):
    status, out, err = run_grep("ab+c", [files[0]])
    assert status == EXIT_SUCCESS
    assert out == "abc\nabbc\n"
    assert err == ""


def test_line_numbers(files):
    _, out, _ = run_grep("ab+c", [files[0]], line_number=True)
    assert out == "1:abc\n3:abbc\n"


def test_multiple_files_prefix_names(files):
    first, second = files
    _, out, _ = run_grep("ab+c", [first, second], ignore_case=True)
    assert out == f"{first}:abc\n{first}:abbc\n{second}:ABC\n"


def test_with_file_name_flag(files):
    _, out, _ = run_grep("ac", [files[0]], with_file_name=True)
    assert out == f"{files[0]}:ac\n"


def test_count(files):
    first, second = files
    _, out, _ = run_grep("ab+c", [first, second], count=True)
    assert out == f"{first}:2\n{second}:0\n"


def test_files_with_matches(files):
    first, second = files
    _, out, _ = run_grep("here", [first, second], files_with_matches=True)
    assert out == f"{second}\n"


def test_no_match_exit_status(files):
    status, out, _ = run_grep("zzz", [files[0]])
    assert status == EXIT_FAILURE
    assert out == ""


def test_missing_file_does_not_stop_search(files, tmp_path):
    missing = str(tmp_path / "missing.txt")
    status, out, err = run_grep("ab+c", [missing, files[0]])
    assert status == EXIT_ERROR
    assert out == f"{files[0]}:abc\n{files[0]}:abbc\n"
    assert err == f"grep: {missing}: No such file or directory\n"


def test_directory_is_an_access_error(tmp_path):
    status, _, err = run_grep("x", [str(tmp_path)])
    assert status == EXIT_ERROR
    assert err.startswith(f"grep: {tmp_path}: ")


def test_reads_standard_input(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"abc\nac\n")))
    status, out, _ = run_grep("ab+c", [], line_number=True)
    assert status == EXIT_SUCCESS
    assert out == "1:abc\n"


def test_standard_input_name(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"abc\n")))
    _, out, _ = run_grep("abc", ["-"], files_with_matches=True)
    assert out == "(standard input)\n"


def test_lines_are_written_back_unchanged(tmp_path):
    path = tmp_path / "mixed.txt"
    path.write_bytes(b"caf\xe9\r\nac\r\nlast caf")
    _, out, _ = run_grep("caf", [str(path)])
    assert out.encode("utf-8", "surrogateescape") == b"caf\xe9\r\nlast caf\n"

    _, out, _ = run_grep("^ac$", [str(path)])
    assert out == "ac\r\n"


def test_files_with_matches_stops_early_and_closes(tmp_path, monkeypatch):
    path = tmp_path / "long.txt"
    path.write_bytes(b"hit\n" + b"miss\n" * 10000)
    opened = []

    @contextlib.contextmanager
    def recording_open_source(name):
        with open_source(name) as stream:
            opened.append(stream)
            yield stream

    monkeypatch.setattr(grep_module, "open_source", recording_open_source)
    status, out, _ = run_grep("hit", [str(path)], files_with_matches=True)

    assert status == EXIT_SUCCESS
    assert out == f"{path}\n"
    assert [stream.closed for stream in opened] == [True]
