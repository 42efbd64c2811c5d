"""Database Layer: SQLAlchemy declarative Base and shared column helpers.

Invariants:
    - All sessions are async (AsyncSession), created by infrastructure/database.py

Design Decisions:
    - asyncpg driver for PostgreSQL: native async, no thread pool overhead
"""
