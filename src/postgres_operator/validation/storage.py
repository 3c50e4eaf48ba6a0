"""Storage rules: size syntax and monotonic growth across updates."""

import logging

from postgres_operator.models.cluster import ClusterSpec
from postgres_operator.models.field_errors import FieldError, FieldErrorList, FieldPath
from postgres_operator.utils.quantity import QuantityError, parse_storage_size

logger = logging.getLogger(__name__)

STORAGE_SIZE_PATH = FieldPath.root("spec", "storage", "size")


def validate_storage_configuration(spec: ClusterSpec) -> FieldErrorList:
    """The storage size must be present and be a valid quantity."""
    size = spec.storage.size
    if not size:
        return [FieldError.required(STORAGE_SIZE_PATH, "storage size is required")]

    try:
        parse_storage_size(size)
    except QuantityError as e:
        return [FieldError.invalid(STORAGE_SIZE_PATH, size, f"Size value isn't valid: {e}")]
    return []


def validate_storage_size_change(
    spec: ClusterSpec, old_spec: ClusterSpec
) -> FieldErrorList:
    """Storage can be enlarged but never reduced."""
    try:
        old_size = parse_storage_size(old_spec.storage.size)
        new_size = parse_storage_size(spec.storage.size)
    except QuantityError as e:
        # Malformed sizes are reported by validate_storage_configuration
        logger.debug(f"Skipping storage size comparison: {e}")
        return []

    if new_size < old_size:
        return [
            FieldError.invalid(
                STORAGE_SIZE_PATH,
                spec.storage.size,
                f"storage cannot be reduced from {old_spec.storage.size} "
                f"to {spec.storage.size}",
            )
        ]
    return []
