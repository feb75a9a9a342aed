from pathlib import Path
from urllib.parse import unquote

import pytest

from pklkit.module_source import ModuleSource, file_source, text_source, uri_source


def test_path_source():
    src = file_source("/usr/local/myfile.pkl")
    assert src.uri.geturl() == "file:///usr/local/myfile.pkl"
    src = file_source("/usr", "local", "lib", "myotherfile.pkl")
    assert src.uri.geturl() == "file:///usr/local/lib/myotherfile.pkl"


def test_file_source_has_no_contents():
    src = file_source("/usr/local/myfile.pkl")
    assert src.contents == ""
    assert src.uri.scheme == "file"


def test_file_source_cleans_path():
    src = file_source("/usr/local/../lib/./x.pkl")
    assert src.uri.geturl() == "file:///usr/lib/x.pkl"


def test_file_source_relative_resolves_against_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    src = file_source("a", "b.pkl")
    assert unquote(src.uri.path) == Path.cwd().as_posix() + "/a/b.pkl"


def test_file_source_escapes_spaces():
    src = file_source("/my dir/file.pkl")
    assert src.uri.geturl() == "file:///my%20dir/file.pkl"


def test_text_source():
    src = text_source("foo = 1")
    assert src.uri.geturl() == "repl:text"
    assert src.contents == "foo = 1"


def test_uri_source():
    src = uri_source("package://example.com/foo@1.0.0#/bar.pkl")
    assert src.uri.scheme == "package"
    assert src.uri.netloc == "example.com"
    assert src.uri.path == "/foo@1.0.0"
    assert src.uri.fragment == "/bar.pkl"
    assert src.contents == ""


def test_uri_source_round_trip():
    text = "https://example.com/mod.pkl"
    assert uri_source(text).uri.geturl() == text


def test_uri_source_invalid_raises():
    with pytest.raises(ValueError):
        uri_source("http://[::1")


def test_module_source_equality():
    assert text_source("x") == ModuleSource(uri=text_source("y").uri, contents="x")