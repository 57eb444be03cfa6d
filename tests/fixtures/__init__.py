"""Shared test fixtures package.

Provides the in-memory Lambda provider and recording sinks used across
the unit tests.
"""
