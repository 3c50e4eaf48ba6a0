"""
Utility modules for the PostgreSQL operator.

This package contains helper functions and classes for:
- Storage quantity parsing
- Image tag and PostgreSQL version handling
- PostgreSQL configuration parameter tables
- Installing the operator executable into shared volumes
"""
