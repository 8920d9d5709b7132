"""
Test suite for Stock Suite.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_batch_service.py -v
"""
