"""
Test suite for the bulk import engine.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_reconciler.py -v
"""
