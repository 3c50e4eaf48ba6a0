"""
Configuration change rules.

Compares the PostgreSQL parameters of an update with the persisted ones.
Fixed parameters can never change, and a major version upgrade must not be
combined with any parameter change: both are checked independently, so an
update doing both reports both.
"""

import json
import logging
from collections.abc import Set

from postgres_operator.models.cluster import ClusterSpec
from postgres_operator.models.field_errors import FieldError, FieldErrorList, FieldPath
from postgres_operator.utils.images import (
    ImageVersionError,
    get_image_version,
    resolve_image_name,
)

logger = logging.getLogger(__name__)

PARAMETERS_PATH = FieldPath.root("spec", "postgresql", "parameters")
IMAGE_NAME_PATH = FieldPath.root("spec", "imageName")


def collect_parameter_differences(
    old: dict[str, str], new: dict[str, str]
) -> dict[str, tuple[str | None, str | None]]:
    """
    Collect the parameters whose value differs between two configurations.

    Returns:
        Mapping of parameter name to (old value, new value), sorted by name;
        None stands for a parameter missing on that side
    """
    return {
        key: (old.get(key), new.get(key))
        for key in sorted(old.keys() | new.keys())
        if old.get(key) != new.get(key)
    }


def _major_version_changed(old_image: str, new_image: str) -> bool:
    try:
        old_version = get_image_version(old_image)
        new_version = get_image_version(new_image)
    except ImageVersionError as e:
        # Unparsable tags are reported by the image rules
        logger.debug(f"Cannot compare major versions: {e}")
        return False
    return old_version.major != new_version.major


def validate_configuration_change(
    spec: ClusterSpec,
    old_spec: ClusterSpec,
    fixed_parameters: Set[str],
    default_image: str,
) -> FieldErrorList:
    """
    Validate the parameter changes of an update.

    Args:
        spec: The updated cluster spec
        old_spec: The persisted cluster spec
        fixed_parameters: Parameter names that cannot change after creation
        default_image: Image used for an empty imageName
    """
    result: FieldErrorList = []

    differences = collect_parameter_differences(old_spec.parameters, spec.parameters)

    for key, (_old_value, new_value) in differences.items():
        if key in fixed_parameters:
            result.append(
                FieldError.forbidden(
                    PARAMETERS_PATH.key(key),
                    f"Can't change fixed configuration parameter {key!r} "
                    f"(requested value: {new_value!r})",
                )
            )

    old_image = resolve_image_name(old_spec.image_name, default_image)
    new_image = resolve_image_name(spec.image_name, default_image)
    if differences and _major_version_changed(old_image, new_image):
        changed = json.dumps(
            {key: new for key, (_old, new) in differences.items()}, sort_keys=True
        )
        result.append(
            FieldError.invalid(
                IMAGE_NAME_PATH,
                spec.image_name,
                "Can't change configuration and upgrade major version "
                f"simultaneously. Changed PostgreSQL parameters: {changed}",
            )
        )

    return result
