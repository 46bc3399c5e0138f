"""Tests for Version parsing, ordering and component indexes."""

import pytest

from chored.core.errors import ValidationError
from chored.core.version import Version, parse_index, resolve_index


def nums(*numbers):
    return Version(numbers)


class TestParse:
    """Strict and lax version parsing."""

    def test_strict_accepts_optional_v_prefix(self):
        assert Version.parse("1.2.3") == nums(1, 2, 3)
        assert Version.parse("v1.2.3") == nums(1, 2, 3)
        assert Version.parse("7") == nums(7)

    def test_strict_rejects_suffix(self):
        with pytest.raises(ValidationError, match="Invalid version"):
            Version.parse("v1.2.3rc1")
        assert Version.try_parse("1.2.x") is None

    def test_lax_drops_prefix_and_suffix(self):
        assert Version.parse_lax("v1.2.3rc1") == nums(1, 2, 3)
        assert Version.parse_lax("version-10.200.33") == nums(10, 200, 33)
        assert Version.parse_lax("release-1.2.0-beta") == nums(1, 2, 0)

    def test_lax_needs_at_least_two_components(self):
        assert Version.parse_lax("main") is None
        assert Version.parse_lax("v2") is None

    def test_show_and_tag(self):
        v = nums(1, 0, 12)
        assert v.show() == "1.0.12"
        assert v.tag() == "v1.0.12"
        assert str(v) == "1.0.12"
        assert Version.parse(v.show()).show() == v.show()


class TestOrdering:
    """Version.compare and rich comparisons."""

    def test_sort(self):
        versions = [nums(1, 2, 3), nums(1), nums(2, 1), nums(0, 1, 2)]
        assert sorted(versions) == [nums(0, 1, 2), nums(1), nums(1, 2, 3), nums(2, 1)]

    def test_absent_component_sorts_first(self):
        assert Version.compare(nums(1), nums(1, 2, 3)) < 0
        assert Version.compare(nums(1, 2, 3), nums(1)) > 0

    def test_trailing_zero_is_greater_than_absent(self):
        assert Version.compare(nums(1, 0), nums(1)) > 0
        assert nums(1) < nums(1, 0)

    def test_equal(self):
        assert Version.compare(nums(1, 2), nums(1, 2)) == 0
        assert nums(1, 2) == Version.parse("v1.2")

    def test_max(self):
        assert max([nums(0, 9), nums(1, 10), nums(1, 9, 9)]) == nums(1, 10)


class TestIndex:
    """Named and numeric component indexes."""

    def test_named(self):
        assert [resolve_index(i) for i in ("major", "minor", "patch")] == [0, 1, 2]

    def test_numeric_passes_through(self):
        assert resolve_index(5) == 5

    @pytest.mark.parametrize("bad", ["huge", -1, True])
    def test_invalid(self, bad):
        with pytest.raises(ValidationError, match="Invalid version index"):
            resolve_index(bad)

    def test_parse_index_from_cli_text(self):
        assert parse_index("minor") == "minor"
        assert parse_index("3") == 3
        assert parse_index(1) == 1
        with pytest.raises(ValidationError):
            parse_index("micro")
