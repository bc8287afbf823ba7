"""Exceptions raised by the search layer.

Configuration and validation errors are raised before any cache or network
work happens. Upstream errors come out of the cache coordinator unchanged and
are never cached. Location resolution errors never reach API callers: the
normalizer degrades to passing the place name through.
"""

from enum import Enum

from travel_planner.models import AppError, ErrorCode, RecoveryOption


class TravelPlannerError(Exception):
    """Base class for errors that map onto an API error response."""

    code: ErrorCode = ErrorCode.API_ERROR
    status_code: int = 500
    user_message: str = "Something went wrong. Please try again."

    def __init__(self, message: str, user_message: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if user_message is not None:
            self.user_message = user_message

    def recovery_options(self) -> list[RecoveryOption] | None:
        return None

    def to_app_error(self) -> AppError:
        return AppError(
            code=self.code,
            message=self.message,
            user_message=self.user_message,
            recovery_options=self.recovery_options(),
        )


class ConfigurationError(TravelPlannerError):
    """The upstream provider credential is missing. Operator-fixable."""

    code = ErrorCode.SERVICE_UNAVAILABLE
    status_code = 503
    user_message = "Search is not available right now. Please contact the administrator."


class SearchValidationError(TravelPlannerError):
    """A required search parameter is missing or malformed."""

    code = ErrorCode.INVALID_INPUT
    status_code = 400
    user_message = "Invalid search. Please check your input and try again."

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class UpstreamFailure(str, Enum):
    TIMEOUT = "timeout"
    REJECTED = "rejected"
    UNREACHABLE = "unreachable"
    MALFORMED = "malformed"


_UPSTREAM_CODES = {
    UpstreamFailure.TIMEOUT: (ErrorCode.UPSTREAM_TIMEOUT, 504),
    UpstreamFailure.REJECTED: (ErrorCode.UPSTREAM_REJECTED, 502),
    UpstreamFailure.UNREACHABLE: (ErrorCode.UPSTREAM_UNAVAILABLE, 502),
    UpstreamFailure.MALFORMED: (ErrorCode.UPSTREAM_MALFORMED, 502),
}


class UpstreamError(TravelPlannerError):
    """The upstream search call failed. Transient: retry later."""

    user_message = "Search failed. Please try again in a moment."

    def __init__(
        self,
        message: str,
        kind: UpstreamFailure,
        upstream_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.upstream_status = upstream_status
        self.code, self.status_code = _UPSTREAM_CODES[kind]

    def recovery_options(self) -> list[RecoveryOption] | None:
        return [RecoveryOption(label="Retry", action="retry")]


class LocationResolutionError(TravelPlannerError):
    """A knowledge-base lookup for a location code failed."""
