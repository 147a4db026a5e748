"""Test suite for the session engine.

Test structure follows the test pyramid:
- unit/: Unit tests - domain logic, caches and services in isolation
- integration/: Integration tests - SQLAlchemy store on a real SQLite database
"""
