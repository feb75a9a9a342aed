import pytest

from pklkit.version import (
    PKL_VERSION_0_26,
    PKL_VERSION_0_27,
    Semver,
    parse_semver,
)


def compare_versions(v1, v2):
    return parse_semver(v1).compare_to(parse_semver(v2))


@pytest.mark.parametrize(
    "v1, v2, expected",
    [
        ("1.0.0", "2.0.0", -1),
        ("1.0.0", "1.0.1", -1),
        ("1.0.0", "1.1.0", -1),
        ("1.0.5", "1.5.0", -1),
        ("1.0.0", "1.0.0", 0),
        ("1.1.0", "1.1.0", 0),
        ("5.1.0", "5.1.0", 0),
        ("2.0.0", "1.0.0", 1),
        ("2.0.0", "0.2.0", 1),
        ("2.0.0", "0.0.2", 1),
        ("2.0.0", "0.0.15", 1),
        ("2.0.0-alpha", "2.0.0-beta", -1),
        ("2.0.0-alpha", "2.0.0-aaa", 1),
        ("2.0.0-alpha", "2.0.0-alpha", 0),
        ("2.0.0-1.2.3", "2.0.0-1.2.3", 0),
        ("2.0.0-1.2.3", "2.0.0-1.2.2", 1),
        ("2.0.0-a.b.3", "2.0.0-a.b.3", 0),
        ("2.0.0-1.2.3.4", "2.0.0-1.2.3", 1),
        ("2.0.0+foo", "2.0.0+bar", 0),
    ],
)
def test_compare_semver_versions(v1, v2, expected):
    assert compare_versions(v1, v2) == expected


def test_parse_fields():
    version = parse_semver("2.0.0-alpha.1+build.5")
    assert version == Semver(2, 0, 0, "alpha.1", "build.5")


def test_parse_finds_version_inside_text():
    assert parse_semver("Pkl 0.27.2 (macOS, native)") == Semver(0, 27, 2)


@pytest.mark.parametrize("text", ["1.0.0", "2.0.0-alpha", "2.0.0+foo", "2.0.0-1.2.3+bar"])
def test_string_round_trip(text):
    assert str(parse_semver(text)) == text


def test_parse_failure():
    with pytest.raises(ValueError, match="failed to parse abc as semver"):
        parse_semver("abc")


def test_prerelease_identifiers():
    ids = parse_semver("2.0.0-a.12").prerelease_identifiers()
    assert [(i.alpha_id, i.numeric_id) for i in ids] == [("a", 0), ("", 12)]
    assert parse_semver("2.0.0").prerelease_identifiers() == []


def test_compare_to_string():
    assert parse_semver("1.0.0").compare_to_string("2.0.0") == -1
    with pytest.raises(ValueError):
        parse_semver("1.0.0").compare_to_string("nope")


def test_greater_and_less():
    assert PKL_VERSION_0_27.is_greater_than(PKL_VERSION_0_26)
    assert PKL_VERSION_0_26.is_less_than(PKL_VERSION_0_27)
    assert not PKL_VERSION_0_26.is_greater_than(parse_semver("0.26.0"))