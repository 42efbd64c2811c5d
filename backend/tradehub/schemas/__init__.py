"""Pydantic Schemas: validation for pipeline inputs and procedure results.

Invariants:
    - Schemas validate at system boundary (RPC input, procedure output)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are wire contracts, models are persistence
"""
