"""
Tests package - Test suite for the PostgreSQL operator admission layer.

Contains:
- unit/: Unit tests for individual components
"""
