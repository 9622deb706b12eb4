"""Core Layer: pure logic, no IO, no async, no Redis.

Invariants:
    - No module in core/ imports from api/ or infrastructure/
    - All functions are pure and deterministic (timestamps injectable)

Design Decisions:
    - Functional core separated from imperative shell: lifecycle rules and
      backoff live here, the supervisor that applies them lives in infrastructure/
"""
