"""
Taxonomie des erreurs métier.

Chaque erreur porte un `code` stable et un `status_code` HTTP ; la couche API
les rend telles quelles, la couche service ne connaît pas FastAPI.
"""

from __future__ import annotations


class DepotError(Exception):
    code = "internal"
    status_code = 500

    def __init__(self, message: str, **context) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class InvalidArgument(DepotError):
    code = "invalid_argument"
    status_code = 400


class NotFound(DepotError):
    code = "not_found"
    status_code = 404


class Conflict(DepotError):
    code = "conflict"
    status_code = 409


class CapacityExceeded(DepotError):
    code = "capacity_exceeded"
    status_code = 422


class InsufficientStock(DepotError):
    code = "insufficient_stock"
    status_code = 422


class InternalFailure(DepotError):
    code = "internal"
    status_code = 500
