"""Error kinds surfaced to API callers."""

from __future__ import annotations


class FantasyError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthorizedError(FantasyError):
    status_code = 401


class ForbiddenError(FantasyError):
    status_code = 403


class NotFoundError(FantasyError):
    status_code = 404


class ValidationFailedError(FantasyError):
    status_code = 400


class InvalidStateError(FantasyError):
    """Business-rule violation such as a full contest or a short wallet."""

    status_code = 400
