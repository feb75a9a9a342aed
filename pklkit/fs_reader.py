"""Module and resource readers that serve files from a local directory tree."""

from __future__ import annotations

import errno
import os
from pathlib import Path
from urllib.parse import SplitResult, unquote, urlsplit

from .reader import ModuleReader, PathElement, Reader, ResourceReader


def _url_path(url: SplitResult | str) -> str:
    if isinstance(url, str):
        url = urlsplit(url)
    return unquote(url.path)


def _is_valid_path(path: str) -> bool:
    """Whether ``path`` is an unrooted, slash-separated path without ``.`` or ``..``."""
    if path == ".":
        return True
    return all(part not in ("", ".", "..") for part in path.split("/"))


class _FsReader(Reader):
    """Shared behaviour of the file tree readers.

    Paths in Pkl are rooted at ``/``: ``/foo.txt`` names ``foo.txt`` at the root.
    """

    def __init__(self, root: str | os.PathLike[str], scheme: str) -> None:
        self._root = Path(root)
        self._scheme = scheme

    @property
    def scheme(self) -> str:
        return self._scheme

    @property
    def is_globbable(self) -> bool:
        return True

    @property
    def has_hierarchical_uris(self) -> bool:
        return True

    def _locate(self, path: str) -> Path:
        if not _is_valid_path(path):
            raise OSError(errno.EINVAL, "invalid argument", path)
        if path == ".":
            return self._root
        return self._root.joinpath(*path.split("/"))

    def _list_directory(self, url: SplitResult | str) -> list[PathElement]:
        path = _url_path(url).strip("/") or "."
        with os.scandir(self._locate(path)) as entries:
            found = sorted(entries, key=lambda entry: entry.name)
        return [
            PathElement(entry.name, entry.is_dir(follow_symlinks=False))
            for entry in found
            if not entry.is_symlink()
        ]

    def _read_bytes(self, url: SplitResult | str) -> bytes:
        path = _url_path(url)
        if path.startswith("/"):
            path = path[1:]
        return self._locate(path).read_bytes()


class FsModuleReader(_FsReader, ModuleReader):
    """Reads Pkl modules from files under a root directory."""

    @property
    def is_local(self) -> bool:
        return True

    def list_elements(self, url: SplitResult | str) -> list[PathElement]:
        """List the directory at ``url``, sorted by name, skipping symlinks."""
        return self._list_directory(url)

    def read(self, url: SplitResult | str) -> str:
        """Return the text of the file named by ``url``."""
        return self._read_bytes(url).decode("utf-8", errors="replace")


class FsResourceReader(_FsReader, ResourceReader):
    """Reads resources from files under a root directory."""

    def list_elements(self, url: SplitResult | str) -> list[PathElement]:
        """List the directory at ``url``, sorted by name, skipping symlinks."""
        return self._list_directory(url)

    def read(self, url: SplitResult | str) -> bytes:
        """Return the bytes of the file named by ``url``."""
        return self._read_bytes(url)