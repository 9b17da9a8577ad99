"""
Test Utilities
==============

Shared helpers, mocks and assertions for the test suite.
"""
