"""
PostgreSQL Operator - Admission layer for replicated PostgreSQL clusters.

This package defaults and validates Cluster resources before Kubernetes
persists them:
- Defaulting of new Clusters
- Validation of creations and updates against the persisted object
- Entry-point bootstrap into instance pods
"""

__version__ = "0.1.0"
