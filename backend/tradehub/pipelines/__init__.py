"""Pipelines: declarative trade mutations executed by one shared engine.

Invariants:
    - Each pipeline module defines its pre-checks, its procedure mapping and its post-effects
    - No pipeline writes outside its single atomic procedure call
"""
