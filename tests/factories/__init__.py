"""
Test Models and Factories

This module provides in-memory persistable models and a sample factory used
across the unit and integration tests.
"""
