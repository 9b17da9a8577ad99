"""
Test Suite
==========

Unit tests for the docshot rendering pipeline.
"""
