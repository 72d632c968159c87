"""
Test suite for the Contact Import Console.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_synonym_matcher.py -v
"""
