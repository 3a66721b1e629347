"""
sourcespell Tests Package
=========================
Test suite for the sourcespell checker.

Run all tests: python3 -m pytest tests/ -v
Run specific: python3 -m pytest tests/test_checker.py -v
"""

__version__ = "1.0.0"
