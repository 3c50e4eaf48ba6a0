"""Replication rules: instance count, synchronous quorum and update strategy."""

from postgres_operator.constants import (
    PRIMARY_UPDATE_STRATEGIES,
    PRIMARY_UPDATE_STRATEGY_SUPERVISED,
)
from postgres_operator.models.cluster import ClusterSpec
from postgres_operator.models.field_errors import FieldError, FieldErrorList, FieldPath

SPEC_PATH = FieldPath.root("spec")


def validate_instances(spec: ClusterSpec) -> FieldErrorList:
    """A cluster has at least one instance, the primary."""
    if spec.instances < 1:
        return [
            FieldError.invalid(
                SPEC_PATH.child("instances"),
                spec.instances,
                "a cluster needs at least one instance",
            )
        ]
    return []


def validate_max_sync_replicas(spec: ClusterSpec) -> FieldErrorList:
    """
    The synchronous quorum must fit the topology.

    maxSyncReplicas must be non-negative and strictly lower than the number
    of instances, leaving the primary out of the quorum.
    """
    path = SPEC_PATH.child("maxSyncReplicas")

    if spec.max_sync_replicas < 0:
        return [
            FieldError.invalid(
                path, spec.max_sync_replicas, "maxSyncReplicas must be a non negative integer"
            )
        ]
    if spec.max_sync_replicas >= spec.instances:
        return [
            FieldError.invalid(
                path,
                spec.max_sync_replicas,
                "maxSyncReplicas must be lower than the number of instances",
            )
        ]
    return []


def validate_primary_update_strategy(spec: ClusterSpec) -> FieldErrorList:
    """Supervised primary updates need at least one replica to switch over to."""
    path = SPEC_PATH.child("primaryUpdateStrategy")
    strategy = spec.primary_update_strategy

    if strategy not in PRIMARY_UPDATE_STRATEGIES:
        return [FieldError.not_supported(path, strategy, PRIMARY_UPDATE_STRATEGIES)]

    if strategy == PRIMARY_UPDATE_STRATEGY_SUPERVISED and spec.instances == 1:
        return [
            FieldError.invalid(
                path,
                strategy,
                "supervised update strategy is not allowed for clusters with a "
                "single instance",
            )
        ]
    return []
