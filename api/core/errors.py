"""
Typed application errors.

Services raise these; `main.py` maps them to JSON responses. Nothing in the
service layer catches them to recover.
"""

from __future__ import annotations


class AppError(RuntimeError):
    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(AppError):
    status_code = 404


class ValidationError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


# Store failures are separable from everything else; timeouts are retryable.
class StorageError(AppError):
    status_code = 500

    def __init__(self, detail: str, *, retryable: bool = False) -> None:
        super().__init__(detail)
        self.retryable = retryable
        if retryable:
            self.status_code = 503
