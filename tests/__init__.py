"""
Tests Package - Unit Tests

Test structure:
- tests/unit/ - Fast, isolated unit tests (AWS clients mocked)
- tests/conftest.py - Shared pytest fixtures

No infrastructure required.
"""
