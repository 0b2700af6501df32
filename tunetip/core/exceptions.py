# ============================================================================
# FILE: tunetip/core/exceptions.py
# ============================================================================
"""
Exception classes for the TuneTip service layer.

Services raise these instead of returning None/False so that the HTTP layer
can translate every failure into the right status code with a single handler.

Exception Hierarchy:
    TunetipError (base)
        BadRequestError - invalid or infeasible request (400)
        UnauthorizedError - missing or invalid credentials (401)
        ForbiddenError - role or ownership insufficient (403)
        NotFoundError - playlist, track, collaborator or change request missing (404)
"""
from typing import Optional


class TunetipError(Exception):
    """
    Base exception for all service errors.

    Attributes:
        message: Human-readable error description returned to the client.
        details: Optional dictionary with additional context for logging.
    """

    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class BadRequestError(TunetipError):
    """Duplicate membership, foreign tracks, invalid criteria, owner-role misuse."""

    status_code = 400


class UnauthorizedError(TunetipError):
    status_code = 401


class ForbiddenError(TunetipError):
    """Insufficient role, ownership required, or smart playlist immutability."""

    status_code = 403


class NotFoundError(TunetipError):
    status_code = 404
