"""Infrastructure Layer: the Redis connection and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from api/
    - All redis-py exceptions mapped to core/errors.py types before leaving this layer
"""
