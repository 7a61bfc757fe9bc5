"""
Test suite for eternal-notations

Contains:
- tests/unit/          : Unit tests for individual modules
"""
