"""
Failure Envelope — Typed Marketplace Errors and Response Classification.

Every operation on the marketplace either returns its result or raises one
of the typed errors below. The HTTP layer converts them into the response
envelope defined here; nothing leaves the API as a raw 500.

Error taxonomy:
- NotAuthorizedError: caller is anonymous, or is not the resource owner
- UserNotFoundError / NFTNotFoundError: lookup missed
- InvalidOperationError: a domain rule was violated
- InsufficientFundsError: reserved for real payment integration
- MarketplaceSystemError: an internal invariant was broken

INVARIANT: Errors are raised before any write. A raised error means the
store is exactly as it was before the call.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, PrivateAttr


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Access failures
    NOT_AUTHORIZED = "not_authorized"

    # Resource failures
    USER_NOT_FOUND = "user_not_found"
    NFT_NOT_FOUND = "nft_not_found"

    # Domain rule violations
    INVALID_OPERATION = "invalid_operation"
    INSUFFICIENT_FUNDS = "insufficient_funds"

    # Internal errors
    INVARIANT_VIOLATION = "invariant_violation"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Response envelope for failed API calls.

    Successful calls return their own response models; failures are always
    wrapped in this envelope so clients can branch on `outcome`.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    # Set by finalize_response(), never serialized
    _finalized: bool = PrivateAttr(default=False)

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        Example: NFT not found, caller does not own the NFT.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


# Standard exception types that map to known failures


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class MarketplaceError(KnownError):
    """Base class for every error raised by marketplace operations."""


class NotAuthorizedError(MarketplaceError):
    """Caller is anonymous, or is not allowed to act on the resource."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(
            kind=FailureKind.NOT_AUTHORIZED,
            message="Not authorized",
            detail=detail,
            suggestion="Sign in with a registered identity that owns the NFT.",
            status_code=403,
        )


class UserNotFoundError(MarketplaceError):
    """No user is registered under the principal."""

    def __init__(self, principal_id: str) -> None:
        self.principal_id = principal_id
        super().__init__(
            kind=FailureKind.USER_NOT_FOUND,
            message="User not found",
            detail=f"No user registered for principal '{principal_id}'",
            status_code=404,
        )


class NFTNotFoundError(MarketplaceError):
    """No NFT exists with the id."""

    def __init__(self, nft_id: str) -> None:
        self.nft_id = nft_id
        super().__init__(
            kind=FailureKind.NFT_NOT_FOUND,
            message="NFT not found",
            detail=f"No NFT with id '{nft_id}'",
            status_code=404,
        )


class InvalidOperationError(MarketplaceError):
    """The request breaks a marketplace rule."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(
            kind=FailureKind.INVALID_OPERATION,
            message=f"Invalid operation: {reason}",
            detail=reason,
            status_code=409,
        )


class InsufficientFundsError(MarketplaceError):
    """
    Buyer cannot cover the asking price.

    Reserved for real payment settlement. Purchases are simulated ownership
    transfers, so no current operation raises this.
    """

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(
            kind=FailureKind.INSUFFICIENT_FUNDS,
            message="Insufficient funds",
            detail=f"Required {required}, available {available}",
            status_code=402,
        )


class MarketplaceSystemError(MarketplaceError):
    """An internal invariant was broken. Should be unreachable."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(
            kind=FailureKind.INVARIANT_VIOLATION,
            message=f"System error: {reason}",
            detail=reason,
            suggestion="If this persists, please report the issue.",
            status_code=500,
        )


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================
#
# All failure responses leaving the API pass through finalize_response().
#
# =============================================================================


STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.KNOWN_FAILURE: "The operation failed due to a known issue.",
    OutcomeType.UNKNOWN_FAILURE: (
        "I failed and I don't know why. Try simplifying the request or retrying."
    ),
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.KNOWN_FAILURE: "Check the error details and adjust your request.",
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Validates that success responses carry no failure and that failure
    responses carry failure details, then marks the response as finalized.

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    response._finalized = True

    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """Check if a response has passed through the authority boundary."""
    return response._finalized


def create_known_failure(error: KnownError) -> ApiResponse[Any]:
    """Create a finalized known failure response from a typed error."""
    response = error.to_response()
    if response.failure is not None and response.failure.suggestion is None:
        response.failure.suggestion = STANDARD_SUGGESTIONS[OutcomeType.KNOWN_FAILURE]
    return finalize_response(response)


def create_unknown_failure(
    exception: Exception,
    include_type: bool = True,
) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    The message is fixed and cannot be customized.

    Args:
        exception: The exception that caused the failure
        include_type: Whether to include exception type in detail

    Returns:
        A finalized unknown failure response
    """
    detail = None
    if include_type:
        detail = f"{type(exception).__name__}"

    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE],
            detail=detail,
            suggestion=STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE],
        ),
    )

    return finalize_response(response)
