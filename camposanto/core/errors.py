"""Error kinds raised by the service layer.

Services raise these instead of returning status tuples; the application
error handler turns them into ``{"error": CODE, "message": text}`` JSON with
the HTTP status of the kind. ``NotFound`` is also used when an entity exists
but belongs to another tenant, so existence never leaks across organizations.
"""
from __future__ import annotations


class ServiceError(ValueError):
    status = 500

    def __init__(self, code: str, detail: str | None = None) -> None:
        super().__init__(detail or code)
        self.code = code
        self.detail = detail


class BadRequest(ServiceError):
    status = 400


class Forbidden(ServiceError):
    status = 403


class NotFound(ServiceError):
    status = 404


class Conflict(ServiceError):
    status = 409


class InternalError(ServiceError):
    status = 500
