"""
Container image references and PostgreSQL versions.

The tag of a PostgreSQL image encodes the server version ("13.1",
"12.4-2", "9.6"). This module extracts the tag from an image reference and
turns it into a PostgresVersion that can be compared across updates.

Versions are encoded like PostgreSQL's ``server_version_num``:
13.1 -> 130001, 9.6.3 -> 90603. Before PostgreSQL 10 the major version has
two components (9.6), from 10 onwards only one.
"""

import logging
import re
from dataclasses import dataclass

from postgres_operator.constants import FIRST_SINGLE_COMPONENT_MAJOR

logger = logging.getLogger(__name__)

# Everything from the first character that is neither a digit nor a dot is
# a distribution suffix ("-1", "-alpine") and is not part of the version
_VERSION_PREFIX = re.compile(r"[0-9.]*")
_DIGITS = re.compile(r"[0-9]+")


class ImageVersionError(ValueError):
    """Raised when an image tag does not encode a PostgreSQL version."""


@dataclass(frozen=True, order=True)
class PostgresVersion:
    """A PostgreSQL version as a ``server_version_num``-style integer."""

    number: int

    @property
    def major(self) -> int:
        """Major version, e.g. 130000 for 13.1 and 90600 for 9.6.3."""
        return self.number - self.number % 100

    @property
    def major_label(self) -> str:
        """Human readable major version ("13", "9.6")."""
        head = self.number // 10000
        if head >= FIRST_SINGLE_COMPONENT_MAJOR:
            return str(head)
        return f"{head}.{self.number // 100 % 100}"

    def __str__(self) -> str:
        head = self.number // 10000
        if head >= FIRST_SINGLE_COMPONENT_MAJOR:
            return f"{head}.{self.number % 10000}"
        return f"{self.major_label}.{self.number % 100}"


def get_image_tag(image_name: str) -> str | None:
    """
    Extract the tag from an image reference.

    Args:
        image_name: Reference such as "registry:5000/postgres:13.1@sha256:..."

    Returns:
        The tag, or None when the reference has no tag
    """
    reference = image_name.split("@", 1)[0]
    last_segment = reference.rsplit("/", 1)[-1]
    if ":" not in last_segment:
        return None
    return last_segment.rsplit(":", 1)[1]


def _parse_component(component: str, tag: str) -> int:
    if not _DIGITS.fullmatch(component):
        raise ImageVersionError(f"'{tag}' is not a PostgreSQL version")
    return int(component)


def parse_version_from_tag(tag: str) -> PostgresVersion:
    """
    Parse an image tag into a PostgresVersion.

    Examples:
        "13.1" -> 130001, "13" -> 130000, "12.4-2" -> 120004, "9.6.3" -> 90603

    Raises:
        ImageVersionError: If the tag does not start with a valid version
    """
    version = _VERSION_PREFIX.match(tag).group(0)
    if not version:
        raise ImageVersionError(f"'{tag}' is not a PostgreSQL version")

    components = [_parse_component(c, tag) for c in version.split(".")]
    major = components[0]

    if major >= FIRST_SINGLE_COMPONENT_MAJOR:
        if len(components) > 2:
            raise ImageVersionError(
                f"'{tag}' has too many version components (expected major[.minor])"
            )
        number = major * 10000
        rest = components[1:]
    else:
        if len(components) < 2:
            raise ImageVersionError(
                f"'{tag}' is missing the second component of a pre-10 major version"
            )
        if len(components) > 3:
            raise ImageVersionError(
                f"'{tag}' has too many version components (expected major.minor[.patch])"
            )
        if components[1] >= 100:
            raise ImageVersionError(f"'{tag}' has an out of range major version")
        number = major * 10000 + components[1] * 100
        rest = components[2:]

    if rest:
        if rest[0] >= 100:
            raise ImageVersionError(f"'{tag}' has an out of range minor version")
        number += rest[0]

    return PostgresVersion(number)


def get_image_version(image_name: str) -> PostgresVersion:
    """
    Parse the PostgreSQL version encoded in an image reference.

    Raises:
        ImageVersionError: If the image has no tag or the tag is not a version
    """
    tag = get_image_tag(image_name)
    if tag is None:
        raise ImageVersionError(f"image '{image_name}' has no tag")
    return parse_version_from_tag(tag)


def resolve_image_name(image_name: str, default_image: str) -> str:
    """Return the image actually deployed for a possibly empty imageName."""
    return image_name or default_image
