"""
Identity gate.

Every state-changing operation starts by checking that the caller is a real
identity. The anonymous principal is what the hosting environment supplies
for unauthenticated requests.
"""

from terrapulse.models.failure import NotAuthorizedError

# Textual form of the anonymous principal
ANONYMOUS_PRINCIPAL = "2vxsx-fae"


def is_anonymous(principal: str | None) -> bool:
    """True for the anonymous sentinel, None, or a blank principal."""
    return principal is None or not principal.strip() or principal == ANONYMOUS_PRINCIPAL


def ensure_authorized(principal: str | None) -> None:
    """
    Reject anonymous callers.

    Raises:
        NotAuthorizedError: If the caller is anonymous
    """
    if is_anonymous(principal):
        raise NotAuthorizedError(detail="Anonymous callers cannot modify state")
