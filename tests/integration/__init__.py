"""
Integration Tests Package for the SmartPark engine

This package contains integration tests that verify the facade, the
stores and the CLI work together correctly.

Integration tests focus on:
1. Complete entry, reservation and exit workflows through ParkingService
2. Failed operations leaving the store unchanged
3. Concurrent parking against one facility
4. SQLite persistence and snapshot restore across restarts
5. The command-line interface

Test Categories:
- Service workflows (in-memory store)
- Concurrent operations
- SQLAlchemy store
- Snapshot bootstrap
- CLI
"""

__version__ = "1.0.0"
__description__ = "Integration tests for the SmartPark engine"

TEST_CATEGORIES = {
    "service_workflows": "Entry, reservation and exit through the facade",
    "concurrent": "Concurrent operation tests",
    "sqlalchemy": "Workflows against SQLite through SQLAlchemy",
    "snapshots": "Snapshot writing and bootstrap restore",
    "cli": "Command-line interface tests",
}
