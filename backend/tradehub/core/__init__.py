"""Core Layer: pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from pipelines/, services/, api/, infrastructure/, or db/
    - All guards and formatters are pure and deterministic; protocols only declare IO
"""
