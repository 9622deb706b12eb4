"""Route Modules: one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter
    - Routes never talk to redis-py directly (delegate to the connection manager)
"""
