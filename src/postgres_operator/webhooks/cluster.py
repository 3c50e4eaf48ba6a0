"""
Admission webhooks for Cluster resources.

- The mutating webhook fills unset fields of new Clusters.
- The validating webhook checks creations and updates, comparing updates
  with the persisted object, and rejects the request listing every field
  error at once.
"""

import logging
import time
from collections.abc import Mapping
from typing import Any

import kopf
from pydantic import ValidationError as PydanticValidationError

from postgres_operator.constants import API_GROUP, API_VERSION, CLUSTER_PLURAL
from postgres_operator.errors import ValidationError
from postgres_operator.models.cluster import Cluster
from postgres_operator.observability.logging import OperatorLogger
from postgres_operator.observability.metrics import metrics_collector
from postgres_operator.services.cluster_defaulter import ClusterDefaulter
from postgres_operator.services.cluster_validator import ClusterValidator
from postgres_operator.settings import settings

logger = logging.getLogger(__name__)
operator_logger = OperatorLogger(__name__)

validator = ClusterValidator(default_image=settings.postgres_image_name)
defaulter = ClusterDefaulter(default_image=settings.postgres_image_name)


def to_plain(value: Any) -> Any:
    """Convert kopf body views into plain dicts and lists."""
    if isinstance(value, Mapping):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [to_plain(item) for item in value]
    return value


def parse_cluster(body: Mapping[str, Any], webhook: str, operation: str) -> Cluster:
    """
    Parse an admission body into a Cluster.

    Raises:
        kopf.AdmissionError: If the body is not a well-formed Cluster
    """
    try:
        return Cluster.model_validate(to_plain(body))
    except PydanticValidationError as e:
        metrics_collector.record_rejected_manifest(webhook, operation)
        error_msg = f"Invalid Cluster specification: {e}"
        logger.warning(error_msg)
        raise kopf.AdmissionError(error_msg) from e


def compute_defaults_patch(
    original: Mapping[str, Any], defaulted: Mapping[str, Any]
) -> dict[str, Any]:
    """
    Collect the values that defaulting added or changed.

    Nested mappings are compared key by key, so only the changed leaves of
    a section are returned.
    """
    changes: dict[str, Any] = {}
    for key, value in defaulted.items():
        current = original.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            nested = compute_defaults_patch(current, value)
            if nested:
                changes[key] = nested
        elif current != value:
            changes[key] = value
    return changes


@kopf.on.mutate(
    API_GROUP,
    API_VERSION,
    CLUSTER_PLURAL,
    id="default-cluster",
    operations=["CREATE"],
)
async def default_cluster(
    body: Mapping[str, Any],
    patch: kopf.Patch,
    name: str,
    namespace: str,
    operation: str,
    dryrun: bool = False,
    **kwargs,
) -> dict:
    """
    Apply the operator defaults to a new Cluster.

    Args:
        body: Submitted resource
        patch: Patch kopf turns into the mutation response
        name: Resource name
        namespace: Resource namespace
        operation: Admission operation (CREATE)
        dryrun: Whether this is a dry-run request

    Returns:
        Empty dict; the mutation is carried by the patch
    """
    started = time.perf_counter()

    cluster = parse_cluster(body, "default", operation)
    defaulted = defaulter.default(cluster.spec)

    # Model defaults are compared on both sides, so only values set by the
    # defaulter end up in the patch
    changes = compute_defaults_patch(
        cluster.spec.model_dump(by_alias=True, exclude_none=True),
        defaulted.model_dump(by_alias=True, exclude_none=True),
    )
    for key, value in changes.items():
        patch.spec[key] = value

    defaulted_fields = sorted(changes)
    operator_logger.log_defaulting(name, namespace, defaulted_fields)
    metrics_collector.record_defaulting(
        operation, defaulted_fields, time.perf_counter() - started
    )

    return {}


@kopf.on.validate(API_GROUP, API_VERSION, CLUSTER_PLURAL, id="validate-cluster")
async def validate_cluster(
    body: Mapping[str, Any],
    name: str,
    namespace: str,
    operation: str,
    dryrun: bool = False,
    old: Mapping[str, Any] | None = None,
    **kwargs,
) -> dict:
    """
    Validate a Cluster before admission.

    Args:
        body: Submitted resource
        name: Resource name
        namespace: Resource namespace
        operation: CREATE or UPDATE
        dryrun: Whether this is a dry-run request
        old: Persisted resource, for updates

    Returns:
        Empty dict when the Cluster is valid

    Raises:
        kopf.AdmissionError: Listing every field error when invalid
    """
    if operation not in ("CREATE", "UPDATE"):
        return {}

    started = time.perf_counter()
    operator_logger.log_admission_start(operation, name, namespace, dryrun)

    new_cluster = parse_cluster(body, "validate", operation)
    old_cluster = None
    if operation == "UPDATE" and old:
        old_cluster = parse_cluster(old, "validate", operation)

    errors_by_family = validator.validate_by_family(new_cluster, old_cluster)
    errors = [error for family_errors in errors_by_family.values() for error in family_errors]

    duration = time.perf_counter() - started
    metrics_collector.record_validation(operation, errors_by_family, duration)
    operator_logger.log_admission_decision(
        operation, name, namespace, [str(error) for error in errors], duration
    )

    if errors:
        raise ValidationError(errors, resource_name=name).as_admission_error()

    return {}
