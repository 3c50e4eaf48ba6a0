"""
Service layer for the PostgreSQL operator admission webhooks.

This package provides the engines behind the webhooks:
- ClusterDefaulter: fills unset fields of new Cluster specs
- ClusterValidator: runs every admission rule and aggregates field errors
"""

from .cluster_defaulter import ClusterDefaulter
from .cluster_validator import ClusterValidator, validate_cluster

__all__ = [
    "ClusterDefaulter",
    "ClusterValidator",
    "validate_cluster",
]
