"""
Models package - Pydantic models for type-safe resource handling.

Defines data models for:
- Cluster specifications (bootstrap, storage, replication)
- Field-scoped validation errors
"""
