"""
Admission rule families for Cluster resources.

Every rule is a pure function returning a list of field errors; an empty
list means the rule is satisfied. Rules never raise for invalid input.
"""

from .bootstrap import (
    validate_bootstrap_method,
    validate_initdb,
    validate_recovery_target,
    validate_superuser_secret,
)
from .configuration import validate_configuration_change
from .image import validate_image_change, validate_image_name
from .naming import validate_name
from .replication import (
    validate_instances,
    validate_max_sync_replicas,
    validate_primary_update_strategy,
)
from .storage import validate_storage_configuration, validate_storage_size_change

__all__ = [
    "validate_bootstrap_method",
    "validate_initdb",
    "validate_superuser_secret",
    "validate_recovery_target",
    "validate_storage_configuration",
    "validate_storage_size_change",
    "validate_image_name",
    "validate_image_change",
    "validate_configuration_change",
    "validate_instances",
    "validate_max_sync_replicas",
    "validate_primary_update_strategy",
    "validate_name",
]
