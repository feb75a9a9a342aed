"""Semantic version parsing and comparison."""

from __future__ import annotations

import re
from dataclasses import dataclass

_SEMVER_PATTERN = re.compile(
    r"(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?",
    re.ASCII,
)

_NUMERIC_IDENTIFIER = re.compile(r"^(0|[1-9]\d*)$", re.ASCII)


def _compare(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


@dataclass(frozen=True)
class _PrereleaseIdentifier:
    numeric_id: int = 0
    alpha_id: str = ""

    def compare_to(self, other: _PrereleaseIdentifier) -> int:
        if self.alpha_id:
            return _compare(self.alpha_id, other.alpha_id)
        return _compare(self.numeric_id, other.numeric_id)


@dataclass(frozen=True)
class Semver:
    """A semantic version."""

    major: int
    minor: int
    patch: int
    prerelease: str = ""
    build: str = ""

    def prerelease_identifiers(self) -> list[_PrereleaseIdentifier]:
        """Return the dot-separated prerelease identifiers."""
        if not self.prerelease:
            return []
        return [
            _PrereleaseIdentifier(numeric_id=int(part))
            if _NUMERIC_IDENTIFIER.match(part)
            else _PrereleaseIdentifier(alpha_id=part)
            for part in self.prerelease.split(".")
        ]

    def compare_to(self, other: Semver) -> int:
        """Return -1, 0 or 1 as this version is lower, equal or higher."""
        for mine, theirs in (
            (self.major, other.major),
            (self.minor, other.minor),
            (self.patch, other.patch),
        ):
            comparison = _compare(mine, theirs)
            if comparison:
                return comparison
        ids1 = self.prerelease_identifiers()
        ids2 = other.prerelease_identifiers()
        for left, right in zip(ids1, ids2):
            comparison = left.compare_to(right)
            if comparison:
                return comparison
        return _compare(len(ids1), len(ids2))

    def compare_to_string(self, other: str) -> int:
        """Parse ``other`` and compare this version with it."""
        return self.compare_to(parse_semver(other))

    def is_greater_than(self, other: Semver) -> bool:
        return self.compare_to(other) > 0

    def is_less_than(self, other: Semver) -> bool:
        return self.compare_to(other) < 0

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text


def parse_semver(text: str) -> Semver:
    """Parse the first semantic version found in ``text``.

    Raises ValueError if no version is found.
    """
    match = _SEMVER_PATTERN.search(text)
    if match is None:
        raise ValueError(f"failed to parse {text} as semver")
    major, minor, patch, prerelease, build = match.groups()
    return Semver(
        major=int(major),
        minor=int(minor),
        patch=int(patch),
        prerelease=prerelease or "",
        build=build or "",
    )


PKL_VERSION_0_25 = parse_semver("0.25.0")
PKL_VERSION_0_26 = parse_semver("0.26.0")
PKL_VERSION_0_27 = parse_semver("0.27.0")