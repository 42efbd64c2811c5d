"""TradeHub Trade-Lifecycle Engine: authoritative state transitions for listings, offers, matches and meetups.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
