"""Request/response models (Pydantic)."""
