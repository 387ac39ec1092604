"""Error taxonomy for capacity operations."""

from enum import Enum
from typing import Optional


class CapacityErrorKind(str, Enum):
    """Classified failure kinds for a capacity operation."""

    INVALID_IDENTIFIER = "InvalidIdentifier"
    INVALID_PARAMETERS = "InvalidParameters"
    CREDENTIAL_UNAVAILABLE = "CredentialUnavailable"
    STATUS_FETCH_FAILED = "StatusFetchFailed"
    RESUME_REJECTED = "ResumeRejected"
    SUSPEND_REJECTED = "SuspendRejected"
    RESIZE_REJECTED = "ResizeRejected"
    CANNOT_SCALE_WHILE_STOPPED = "CannotScaleWhileStopped"
    START_TIMEOUT_BEFORE_SCALE = "StartTimeoutBeforeScale"
    SCALING_FAILED = "ScalingFailed"
    POST_SCALE_VERIFICATION_FAILED = "PostScaleVerificationFailed"
    TIMEOUT = "Timeout"


class CapacityOperationError(Exception):
    """Base class for all capacity operation failures.

    Failures that originate at the management API boundary carry the HTTP
    status code and response body when they are available.
    """

    kind: CapacityErrorKind = CapacityErrorKind.STATUS_FETCH_FAILED

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body

    def __str__(self) -> str:
        """String representation."""
        if self.status_code is None:
            return f"{self.kind.value}: {self.message}"
        body = f" - {self.response_body}" if self.response_body else ""
        return f"{self.kind.value}: {self.message} (HTTP {self.status_code}){body}"


class InvalidIdentifier(CapacityOperationError):
    kind = CapacityErrorKind.INVALID_IDENTIFIER


class InvalidParameters(CapacityOperationError):
    kind = CapacityErrorKind.INVALID_PARAMETERS


class CredentialUnavailable(CapacityOperationError):
    kind = CapacityErrorKind.CREDENTIAL_UNAVAILABLE


class StatusFetchFailed(CapacityOperationError):
    kind = CapacityErrorKind.STATUS_FETCH_FAILED


class ResumeRejected(CapacityOperationError):
    kind = CapacityErrorKind.RESUME_REJECTED


class SuspendRejected(CapacityOperationError):
    kind = CapacityErrorKind.SUSPEND_REJECTED


class ResizeRejected(CapacityOperationError):
    kind = CapacityErrorKind.RESIZE_REJECTED


class CannotScaleWhileStopped(CapacityOperationError):
    kind = CapacityErrorKind.CANNOT_SCALE_WHILE_STOPPED


class StartTimeoutBeforeScale(CapacityOperationError):
    kind = CapacityErrorKind.START_TIMEOUT_BEFORE_SCALE


class ScalingFailed(CapacityOperationError):
    kind = CapacityErrorKind.SCALING_FAILED


class PostScaleVerificationFailed(CapacityOperationError):
    kind = CapacityErrorKind.POST_SCALE_VERIFICATION_FAILED


class WaitTimeout(CapacityOperationError):
    kind = CapacityErrorKind.TIMEOUT


ERRORS_BY_KIND: dict[CapacityErrorKind, type[CapacityOperationError]] = {
    cls.kind: cls
    for cls in (
        InvalidIdentifier,
        InvalidParameters,
        CredentialUnavailable,
        StatusFetchFailed,
        ResumeRejected,
        SuspendRejected,
        ResizeRejected,
        CannotScaleWhileStopped,
        StartTimeoutBeforeScale,
        ScalingFailed,
        PostScaleVerificationFailed,
        WaitTimeout,
    )
}


def error_for(
    kind: CapacityErrorKind,
    message: str,
    status_code: Optional[int] = None,
    response_body: Optional[str] = None,
) -> CapacityOperationError:
    """Build the typed exception for an error kind."""
    return ERRORS_BY_KIND[kind](message, status_code=status_code, response_body=response_body)
