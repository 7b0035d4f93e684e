"""
Core business logic for a training practice.

This module is framework-agnostic - it doesn't import FastAPI, Snowflake,
or any infrastructure concerns, so the bookkeeping rules can be tested
in isolation.
"""
