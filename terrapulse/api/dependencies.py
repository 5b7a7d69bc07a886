"""
Request-scoped dependencies shared by the routers.

The marketplace is a process-wide service object. Tests replace it through
`app.dependency_overrides[get_marketplace]`.
"""

from typing import Annotated

from fastapi import Header

from terrapulse.config import settings
from terrapulse.services.identity import ANONYMOUS_PRINCIPAL
from terrapulse.services.marketplace import Marketplace

_marketplace = Marketplace()


def get_marketplace() -> Marketplace:
    """Dependency that provides the marketplace service."""
    return _marketplace


def get_caller(
    caller: Annotated[
        str,
        Header(
            alias=settings.caller_header,
            description="Authenticated caller principal. Omit for anonymous access.",
        ),
    ] = ANONYMOUS_PRINCIPAL,
) -> str:
    """Dependency that resolves the caller principal from the request headers."""
    return caller.strip() or ANONYMOUS_PRINCIPAL
