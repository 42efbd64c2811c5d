"""Infrastructure Layer: database sessions, atomic procedures, push client, logging.

Invariants:
    - Implements the core/repository_protocols contracts; core never imports from here
    - All external calls wrapped with timeout and error mapping

Design Decisions:
    - Thin wrappers over raw clients (one responsibility per module)
"""
