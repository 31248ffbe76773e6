"""
Test suite for the warehouse terminal.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_scan_orchestrator.py -v
"""
