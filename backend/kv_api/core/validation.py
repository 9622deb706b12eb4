"""Request Validation: presence checks for the SET body.

Invariants:
    - A field is "provided" iff it is truthy: None, "", 0, 0.0, False, [] and {}
      are all treated as missing
    - The string "0" is truthy and therefore accepted

Design Decisions:
    - Loose truthiness kept for compatibility with existing clients, even though
      it rejects legitimate values such as 0 or false. Known latent defect;
      changing it is a behavior change for callers, not a bug fix here.
"""

from typing import Any

from kv_api.core.errors import ValidationError


def is_provided(value: Any) -> bool:
    return bool(value)


def require_key_and_value(key: Any, value: Any) -> tuple[Any, Any]:
    """Return (key, value) unchanged, or raise ValidationError if either is falsy."""
    if not is_provided(key) or not is_provided(value):
        raise ValidationError()
    return key, value
