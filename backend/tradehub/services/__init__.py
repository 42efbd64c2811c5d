"""Services Layer: post-commit side effects for trade pipelines.

Invariants:
    - Services read through the TradeStore protocol and never write trade rows
"""
