"""
Service-layer exceptions.

Services raise these instead of HTTP errors so they can be driven from tests
and scripts; `franchisehub.api.main` maps them onto HTTP responses.
"""


class ServiceError(Exception):
    """Base class; maps to 400 Bad Request."""
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidTransitionError(ServiceError):
    """A status change that the workflow does not allow."""
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class ForbiddenError(ServiceError):
    status_code = 403


class ConflictError(ServiceError):
    status_code = 409
