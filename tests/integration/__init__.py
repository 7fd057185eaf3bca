"""
Integration tests for the leaselock library.

These tests require a real Redis instance, provisioned automatically
with testcontainers. They are skipped if Docker is not available.

Run integration tests:
    pytest tests/integration/ -v

Skip integration tests:
    pytest tests/ -v -m "not integration"
"""
