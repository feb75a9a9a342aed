import pytest

from pklkit.debug import debug, debug_enabled


def test_enabled_when_set_to_one(monkeypatch):
    monkeypatch.setenv("PKL_DEBUG", "1")
    assert debug_enabled() is True


@pytest.mark.parametrize("value", ["0", "true", "", "11"])
def test_disabled_for_other_values(monkeypatch, value):
    monkeypatch.setenv("PKL_DEBUG", value)
    assert debug_enabled() is False


def test_disabled_when_unset(monkeypatch):
    monkeypatch.delenv("PKL_DEBUG", raising=False)
    assert debug_enabled() is False


def test_debug_writes_formatted_line(monkeypatch, capsys):
    monkeypatch.setenv("PKL_DEBUG", "1")
    debug("Registered reader for scheme %r", "fib")
    captured = capsys.readouterr()
    assert captured.err == "[pklkit] Registered reader for scheme 'fib'\n"
    assert captured.out == ""


def test_debug_without_args_keeps_percent(monkeypatch, capsys):
    monkeypatch.setenv("PKL_DEBUG", "1")
    debug("100% done")
    assert capsys.readouterr().err.endswith("100% done\n")


def test_debug_silent_when_disabled(monkeypatch, capsys):
    monkeypatch.delenv("PKL_DEBUG", raising=False)
    debug("Sending message: %s", "payload")
    assert capsys.readouterr().err == ""