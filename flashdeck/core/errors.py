"""Exception hierarchy shared by services, modules and the HTTP layer."""

from __future__ import annotations


class FlashdeckError(Exception):
    """Base error; ``message`` is safe to show to the caller."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundOrDenied(FlashdeckError):
    """Record is missing or belongs to someone else; callers can't tell which."""

    status_code = 404

    def __init__(self, resource: str = "Record") -> None:
        super().__init__(f"{resource} not found or access denied.")
        self.resource = resource


class UpstreamError(FlashdeckError):
    """A collaborator (identity provider, model provider, database) failed."""

    status_code = 502


class IdentityError(UpstreamError):
    status_code = 401


class CompletionError(UpstreamError):
    pass


class DocumentError(UpstreamError):
    status_code = 400


__all__ = [
    "FlashdeckError",
    "NotFoundOrDenied",
    "UpstreamError",
    "IdentityError",
    "CompletionError",
    "DocumentError",
]
