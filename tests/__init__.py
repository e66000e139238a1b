#!/usr/bin/env python3
"""
Test suite.

All tests run against an in-memory SQLite store and need no external
services:

    # Run all tests
    python -m pytest tests/ -v

    # Only the gating/delivery engine
    python -m pytest tests/unit/core -v

    # Using unittest
    python -m unittest discover tests -v
"""
