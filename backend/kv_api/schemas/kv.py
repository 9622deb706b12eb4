"""Pydantic models for the key-value routes.

Invariants:
    - SetRequest accepts any JSON types for key/value; presence is checked by
      core/validation.py, not by Pydantic, so falsy values reach the same 400
"""

from typing import Any

from pydantic import BaseModel


class SetRequest(BaseModel):
    key: Any = None
    value: Any = None


class SetResponse(BaseModel):
    status: str


class GetResponse(BaseModel):
    key: str
    value: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    service: str
    version: str


class RootResponse(BaseModel):
    message: str
    timestamp: str
    endpoints: dict[str, str]
    documentation: str


class ErrorResponse(BaseModel):
    error: str


class StoreErrorResponse(ErrorResponse):
    details: str
