"""
Pydantic models for PostgreSQL Cluster resources.

This module defines type-safe data models for the Cluster custom resource.
The models accept values that the admission rules reject
(two bootstrap methods, negative maxSyncReplicas, unknown update
strategies...) so that every problem can be reported as a field error
instead of a single parsing failure.
"""

from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, Field

from postgres_operator.constants import (
    API_GROUP,
    API_VERSION,
    CLUSTER_KIND,
    DEFAULT_INSTANCES,
    PRIMARY_UPDATE_STRATEGY_UNSUPERVISED,
)

RecoveryTargetSelector: TypeAlias = Literal[
    "targetXID", "targetName", "targetLSN", "targetTime", "targetImmediate"
]


class LocalObjectReference(BaseModel):
    """Reference to an object in the same namespace as the Cluster."""

    model_config = {"populate_by_name": True}

    name: str = Field("", description="Name of the referenced object")


class BootstrapInitDB(BaseModel):
    """Bootstrap a brand new cluster with initdb."""

    model_config = {"populate_by_name": True}

    database: str = Field("", description="Name of the application database")
    owner: str = Field("", description="Name of the owner of the application database")


class RecoveryTarget(BaseModel):
    """
    Point-in-time recovery target.

    Exactly one target selector (xid, name, lsn, time, immediate) is
    expected; the timeline is independent of the selector.
    """

    model_config = {"populate_by_name": True}

    target_tli: str = Field(
        "", alias="targetTLI", description="Timeline: 'latest', 'current' or an ID"
    )
    target_xid: str = Field("", alias="targetXID", description="Transaction ID")
    target_name: str = Field(
        "", alias="targetName", description="Restore point created with pg_create_restore_point"
    )
    target_lsn: str = Field("", alias="targetLSN", description="Write-ahead log location")
    target_time: str = Field("", alias="targetTime", description="Time stamp")
    target_immediate: bool | None = Field(
        None,
        alias="targetImmediate",
        description="End recovery as soon as a consistent state is reached",
    )
    exclusive: bool | None = Field(
        None, description="Stop just before (true) or just after the target"
    )

    @property
    def selectors(self) -> list[RecoveryTargetSelector]:
        """Target selectors that are set, in declaration order."""
        selected: list[RecoveryTargetSelector] = []
        if self.target_xid:
            selected.append("targetXID")
        if self.target_name:
            selected.append("targetName")
        if self.target_lsn:
            selected.append("targetLSN")
        if self.target_time:
            selected.append("targetTime")
        if self.target_immediate:
            selected.append("targetImmediate")
        return selected


class BootstrapRecovery(BaseModel):
    """Bootstrap a cluster by recovering it from an existing backup."""

    model_config = {"populate_by_name": True}

    recovery_target: RecoveryTarget | None = Field(
        None, alias="recoveryTarget", description="Point-in-time recovery target"
    )


BootstrapMethod: TypeAlias = BootstrapInitDB | BootstrapRecovery


class BootstrapConfiguration(BaseModel):
    """
    Bootstrap method selection.

    The manifest exposes one optional key per method; the rules require
    exactly one of them to be set.
    """

    model_config = {"populate_by_name": True}

    initdb: BootstrapInitDB | None = Field(None, description="Bootstrap with initdb")
    recovery: BootstrapRecovery | None = Field(
        None, description="Bootstrap from a backup"
    )

    @property
    def methods(self) -> list[BootstrapMethod]:
        """Every bootstrap method present in the manifest."""
        return [m for m in (self.initdb, self.recovery) if m is not None]


class StorageConfiguration(BaseModel):
    """Persistent storage of each instance."""

    model_config = {"populate_by_name": True}

    size: str = Field("", description="Size of the volume, e.g. '10Gi'")
    storage_class: str | None = Field(
        None, alias="storageClass", description="StorageClass used for the volumes"
    )


class PostgresConfiguration(BaseModel):
    """PostgreSQL server configuration."""

    model_config = {"populate_by_name": True}

    parameters: dict[str, str] = Field(
        default_factory=dict, description="postgresql.conf parameters"
    )


class ClusterSpec(BaseModel):
    """
    Specification of a PostgreSQL cluster.

    This model defines the desired state the reconciliation loop converges
    to once the spec has been defaulted and admitted.
    """

    model_config = {"populate_by_name": True}

    instances: int = Field(
        DEFAULT_INSTANCES, description="Number of instances, primary included"
    )
    image_name: str = Field(
        "", alias="imageName", description="PostgreSQL container image"
    )
    storage: StorageConfiguration = Field(
        default_factory=StorageConfiguration, description="Storage configuration"
    )
    postgres_configuration: PostgresConfiguration = Field(
        default_factory=PostgresConfiguration,
        alias="postgresql",
        description="PostgreSQL configuration",
    )
    bootstrap: BootstrapConfiguration | None = Field(
        None, description="How to create the cluster"
    )
    superuser_secret: LocalObjectReference | None = Field(
        None,
        alias="superuserSecret",
        description="Secret holding the postgres superuser credentials",
    )
    primary_update_strategy: str = Field(
        PRIMARY_UPDATE_STRATEGY_UNSUPERVISED,
        alias="primaryUpdateStrategy",
        description="Whether the primary switchover during updates is automated",
    )
    max_sync_replicas: int = Field(
        0,
        alias="maxSyncReplicas",
        description="Maximum number of synchronous replicas",
    )

    @property
    def parameters(self) -> dict[str, str]:
        return self.postgres_configuration.parameters


class Cluster(BaseModel):
    """
    Complete Cluster custom resource model.

    This represents the full Kubernetes custom resource including
    metadata, spec, and status sections.
    """

    model_config = {"populate_by_name": True}

    api_version: str = Field(f"{API_GROUP}/{API_VERSION}", alias="apiVersion")
    kind: str = Field(CLUSTER_KIND)
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Kubernetes metadata"
    )
    spec: ClusterSpec = Field(
        default_factory=ClusterSpec, description="Cluster specification"
    )
    status: dict[str, Any] | None = Field(
        None, description="Cluster status (managed by the operator)"
    )

    @property
    def name(self) -> str:
        return self.metadata.get("name") or ""
