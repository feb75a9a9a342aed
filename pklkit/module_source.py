"""Sources of modules to evaluate."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import SplitResult, quote, urlsplit

# Characters left unescaped in a URL path.
_PATH_SAFE = "/$&+,:;=@"


def _clean_join(*elements: str) -> str:
    """Join slash-separated path elements and clean the result."""
    joined = "/".join(element for element in elements if element)
    if not joined:
        return ""
    cleaned = posixpath.normpath(joined)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


@dataclass
class ModuleSource:
    """A module for evaluation: its URI and, optionally, its text.

    When ``contents`` is empty, the module is resolved from ``uri`` during
    evaluation.
    """

    uri: SplitResult
    contents: str = ""


def file_source(*args: str) -> ModuleSource:
    """Build a source from a file path, joining the given path elements.

    A relative path is resolved against the current working directory.
    """
    path = _clean_join(*args)
    if not posixpath.isabs(path):
        path = _clean_join(Path.cwd().as_posix(), path)
    return ModuleSource(
        uri=SplitResult("file", "", quote(path, safe=_PATH_SAFE), "", "")
    )


def text_source(text: str) -> ModuleSource:
    """Build a source whose contents are ``text``, with URI ``repl:text``."""
    return ModuleSource(uri=SplitResult("repl", "", "text", "", ""), contents=text)


def uri_source(uri: str) -> ModuleSource:
    """Build a source from a URI string; raise ValueError if it is invalid."""
    return ModuleSource(uri=urlsplit(uri))