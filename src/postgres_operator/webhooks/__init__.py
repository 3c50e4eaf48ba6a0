"""
Admission webhooks for the PostgreSQL operator.

This module provides the mutating (defaulting) and validating admission
webhooks for Cluster resources. Webhooks run before resources are accepted
by Kubernetes, so the reconciliation loop only ever sees defaulted and
valid Clusters.

Webhooks are served by Kopf's built-in HTTPS server.
"""
