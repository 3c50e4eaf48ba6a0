"""
Unit tests for image reference and PostgreSQL version parsing.

Versions are compared as server_version_num style integers, so these
tests also pin the encoding of pre-10 two-component majors.
"""

import pytest

from postgres_operator.utils.images import (
    ImageVersionError,
    PostgresVersion,
    get_image_tag,
    get_image_version,
    parse_version_from_tag,
    resolve_image_name,
)


class TestGetImageTag:
    """Test cases for tag extraction."""

    @pytest.mark.parametrize(
        "image,expected",
        [
            ("postgres:13.1", "13.1"),
            ("quay.io/enterprisedb/postgresql:12.4-2", "12.4-2"),
            ("registry:5000/postgres:9.6", "9.6"),
            ("postgres:13@sha256:0123abcd", "13"),
            ("postgres", None),
            ("registry:5000/postgres", None),
            ("postgres@sha256:0123abcd", None),
        ],
    )
    def test_tags(self, image, expected):
        assert get_image_tag(image) == expected


class TestParseVersionFromTag:
    """Test cases for version parsing."""

    @pytest.mark.parametrize(
        "tag,expected",
        [
            ("13.1", 130001),
            ("13", 130000),
            ("12.4-2", 120004),
            ("13.1-alpine", 130001),
            ("11.0", 110000),
            ("10.4", 100004),
            ("9.6", 90600),
            ("9.6.3", 90603),
            ("9.5.25", 90525),
        ],
    )
    def test_valid_tags(self, tag, expected):
        assert parse_version_from_tag(tag).number == expected

    @pytest.mark.parametrize(
        "tag",
        [
            "latest",
            "",
            "alpine",
            "1",
            "9",
            "13.1.2",
            "9.6.3.1",
            "13.100",
            "9.100",
            "13..1",
            "13.",
            "\u0661\u0663",
        ],
    )
    def test_invalid_tags(self, tag):
        with pytest.raises(ImageVersionError):
            parse_version_from_tag(tag)


class TestPostgresVersion:
    """Test cases for version comparison and rendering."""

    def test_major(self):
        assert PostgresVersion(130001).major == 130000
        assert PostgresVersion(90603).major == 90600

    def test_major_label(self):
        assert PostgresVersion(130001).major_label == "13"
        assert PostgresVersion(90603).major_label == "9.6"

    def test_str(self):
        assert str(PostgresVersion(130001)) == "13.1"
        assert str(PostgresVersion(90603)) == "9.6.3"

    def test_ordering(self):
        assert PostgresVersion(90603) < PostgresVersion(100000)
        assert PostgresVersion(100004) < PostgresVersion(110000)


class TestGetImageVersion:
    """Test cases for image version extraction."""

    def test_tagged_image(self):
        assert get_image_version("postgres:10.4") == PostgresVersion(100004)

    def test_untagged_image(self):
        with pytest.raises(ImageVersionError, match="has no tag"):
            get_image_version("postgres")

    def test_colon_in_tag_position(self):
        # The tag is what follows the last colon, "1" is not a complete version
        with pytest.raises(ImageVersionError):
            get_image_version("postgres:12:1")

    def test_resolve_image_name(self):
        assert resolve_image_name("", "postgres:13") == "postgres:13"
        assert resolve_image_name("postgres:12", "postgres:13") == "postgres:12"
