"""FastAPI dependencies for identifying the caller.

Identity is opaque: the caller supplies a user id in the `X-User-Id` header
and every stored document is keyed by it. There is no authentication here.
"""

from fastapi import HTTPException, status, Header


def get_current_user_id(
    x_user_id: str = Header(default="", alias="X-User-Id"),
) -> str:
    """Get the current user id from the request.

    Raises:
        HTTPException: If the header is missing or blank
    """
    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return user_id
