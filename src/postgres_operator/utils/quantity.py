"""
Storage quantity parsing.

Sizes use the Kubernetes quantity notation ("512M", "10Gi", "1.5G"). Parsing
is delegated to the Kubernetes client so the operator accepts exactly what
the API server accepts for PersistentVolumeClaim requests.
"""

import logging
from decimal import Decimal

from kubernetes.utils import parse_quantity

logger = logging.getLogger(__name__)


class QuantityError(ValueError):
    """Raised when a string is not a usable storage quantity."""


def parse_storage_size(size: str) -> Decimal:
    """
    Parse a storage size into a number of bytes.

    Args:
        size: Quantity string such as "1Gi" or "512M"

    Returns:
        The size in bytes as a Decimal, comparable across units

    Raises:
        QuantityError: If the string is not a finite, non-negative quantity
    """
    if not size or size != size.strip():
        raise QuantityError(f"'{size}' is not a valid quantity")

    try:
        value = parse_quantity(size)
    except ValueError as e:
        raise QuantityError(f"'{size}' is not a valid quantity: {e}") from e

    if not value.is_finite():
        raise QuantityError(f"'{size}' is not a finite quantity")
    if value < 0:
        raise QuantityError(f"'{size}' is negative")

    logger.debug(f"Parsed storage size {size} as {value} bytes")
    return value
