"""
FastAPI dependency functions for identity.

The identity middleware in ``shortener.app.create_app`` resolves the caller before
routing and stores it on ``request.state.user_id``; routes receive it through
``Depends(get_current_user)`` as a typed ``uuid.UUID``.
"""

import uuid

from fastapi import HTTPException, Request, status


def get_current_user(request: Request) -> uuid.UUID:
    """
    Dependency that returns the caller's identity.

    Raises:
        HTTPException: 422 if no identity was resolved for the request.
    """
    uid = getattr(request.state, "user_id", None)
    if not isinstance(uid, uuid.UUID):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="No user identity",
        )
    return uid
