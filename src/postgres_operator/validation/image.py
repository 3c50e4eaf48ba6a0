"""
Image rules.

The image tag is the only source of the PostgreSQL version of a cluster,
so it must be explicit and parsable, and an update may never move the
cluster to an older major version.
"""

import logging

from postgres_operator.constants import LATEST_TAG
from postgres_operator.models.cluster import ClusterSpec
from postgres_operator.models.field_errors import FieldError, FieldErrorList, FieldPath
from postgres_operator.utils.images import (
    ImageVersionError,
    get_image_tag,
    get_image_version,
    parse_version_from_tag,
    resolve_image_name,
)

logger = logging.getLogger(__name__)

IMAGE_NAME_PATH = FieldPath.root("spec", "imageName")


def validate_image_name(spec: ClusterSpec) -> FieldErrorList:
    """
    The image tag must be a PostgreSQL version.

    An empty imageName or an untagged reference is accepted: the default
    image is applied by the defaulting webhook.
    """
    if not spec.image_name:
        return []

    tag = get_image_tag(spec.image_name)
    if tag is None:
        return []

    if tag == LATEST_TAG:
        return [
            FieldError.invalid(
                IMAGE_NAME_PATH,
                spec.image_name,
                "Can't use 'latest' as image tag as we can't detect upgrades",
            )
        ]

    try:
        parse_version_from_tag(tag)
    except ImageVersionError as e:
        return [
            FieldError.invalid(
                IMAGE_NAME_PATH,
                spec.image_name,
                f"invalid version tag: {e}",
            )
        ]
    return []


def validate_image_change(
    spec: ClusterSpec, old_image_name: str, default_image: str
) -> FieldErrorList:
    """
    An update can move to any image of the same or a newer major version.

    Args:
        spec: The updated cluster spec
        old_image_name: imageName of the persisted spec (may be empty)
        default_image: Image used for an empty imageName
    """
    old_image = resolve_image_name(old_image_name, default_image)
    new_image = resolve_image_name(spec.image_name, default_image)

    if old_image == new_image:
        return []

    try:
        old_version = get_image_version(old_image)
    except ImageVersionError as e:
        return [
            FieldError.invalid(
                IMAGE_NAME_PATH,
                spec.image_name,
                f"cannot detect the version of the previous image: {e}",
            )
        ]

    try:
        new_version = get_image_version(new_image)
    except ImageVersionError as e:
        return [
            FieldError.invalid(
                IMAGE_NAME_PATH,
                spec.image_name,
                f"cannot detect the version of the new image: {e}",
            )
        ]

    if new_version.major < old_version.major:
        return [
            FieldError.invalid(
                IMAGE_NAME_PATH,
                spec.image_name,
                f"can't downgrade from major {old_version.major_label} "
                f"to {new_version.major_label}: downgrades are not supported",
            )
        ]

    logger.debug(f"Image change from {old_version} to {new_version} accepted")
    return []
