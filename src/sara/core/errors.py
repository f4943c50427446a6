"""Error taxonomy shared by tools, orchestration and HTTP surfaces."""

from __future__ import annotations


class SaraError(Exception):
    """Base error; `status_code` is the HTTP status used at the boundary."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SaraError):
    status_code = 400


class ToolArgumentError(ValidationError):
    pass


class ModeError(SaraError):
    """A demo-only or live-only operation invoked in the wrong mode."""

    status_code = 400


class AuthzError(SaraError):
    status_code = 403


class ForbiddenRoleError(AuthzError):
    pass


class NotFoundError(SaraError):
    status_code = 404


class UnknownToolError(NotFoundError):
    pass


class DomainInvariantError(SaraError):
    status_code = 409


class NoRoleAssignedError(DomainInvariantError):
    pass


class ExpiredError(SaraError):
    status_code = 410


class UpstreamError(SaraError):
    """Completion endpoint or messaging provider failure."""

    status_code = 502
