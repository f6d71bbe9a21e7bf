"""Unit tests for the database layer.

This package contains unit tests for character_figure/core/database,
including:

- Entity defaults and column mapping
- Repository queries (FIFO credit view, history filters, gallery listing)
- Mocked-session tests of the shared base repository

All tests use in-memory SQLite or mocks to ensure fast execution
without requiring external database services.
"""
