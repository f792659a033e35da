"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from storefront.models.identity import Identity


def get_identity(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_email: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Identity | None:
    """Resolve the identity forwarded by the session boundary.

    The auth proxy in front of the service validates the session and sets
    these headers; requests without ``X-User-Id`` are anonymous.
    """

    if not x_user_id:
        return None
    role = "admin" if (x_user_role or "").lower() == "admin" else "customer"
    return Identity(user_id=x_user_id, email=x_user_email, role=role)


IdentityDependency = Annotated[Identity | None, Depends(get_identity)]


def require_admin(identity: IdentityDependency) -> Identity:
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in required",
        )
    if not identity.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return identity


AdminDependency = Annotated[Identity, Depends(require_admin)]
