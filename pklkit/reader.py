"""Interfaces for custom module and resource readers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import SplitResult

from .msgapi import ModuleReaderSpec, ResourceReaderSpec


@dataclass(frozen=True)
class PathElement:
    """An element within a base URI.

    A non-directory element named ``bar.txt`` at base URI ``file:///foo/``
    stands for the resource ``file:///foo/bar.txt``.
    """

    name: str
    is_directory: bool = False


class Reader(ABC):
    """What module readers and resource readers have in common."""

    @property
    @abstractmethod
    def scheme(self) -> str:
        """The URI scheme this reader handles, without the trailing ``:``."""

    @property
    @abstractmethod
    def is_globbable(self) -> bool:
        """Whether globbing through ``import*`` and ``read*`` is supported."""

    @property
    @abstractmethod
    def has_hierarchical_uris(self) -> bool:
        """Whether URIs of this scheme are hierarchical (``scheme:/a/b``)."""

    @abstractmethod
    def list_elements(self, url: SplitResult) -> list[PathElement]:
        """Return the elements found at ``url``.

        For non-hierarchical readers the path is empty and every available
        element should be returned.
        """


class ResourceReader(Reader):
    """A custom reader of resources, used by Pkl's ``read`` expressions."""

    @abstractmethod
    def read(self, url: SplitResult) -> bytes:
        """Return the byte contents of the resource at ``url``."""


class ModuleReader(Reader):
    """A custom reader of modules, used by Pkl's ``import``."""

    @property
    @abstractmethod
    def is_local(self) -> bool:
        """Whether modules of this scheme are local; enables triple-dot imports."""

    @abstractmethod
    def read(self, url: SplitResult) -> str:
        """Return the text of the module at ``url``."""


def resource_readers_to_message(
    readers: Iterable[ResourceReader],
) -> list[ResourceReaderSpec]:
    """Describe resource readers the way the wire protocol expects."""
    return [
        ResourceReaderSpec(
            scheme=reader.scheme,
            has_hierarchical_uris=reader.has_hierarchical_uris,
            is_globbable=reader.is_globbable,
        )
        for reader in readers
    ]


def module_readers_to_message(
    readers: Iterable[ModuleReader],
) -> list[ModuleReaderSpec]:
    """Describe module readers the way the wire protocol expects."""
    return [
        ModuleReaderSpec(
            scheme=reader.scheme,
            has_hierarchical_uris=reader.has_hierarchical_uris,
            is_globbable=reader.is_globbable,
            is_local=reader.is_local,
        )
        for reader in readers
    ]