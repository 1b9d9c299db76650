from __future__ import annotations

from fastapi import Header, HTTPException

# The upstream gateway authenticates the caller and forwards the user id.
USER_ID_HEADER = "x-user-id"


async def get_caller_id(x_user_id: str | None = Header(None)) -> str | None:
    """Return the forwarded user id, or None for anonymous callers."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


async def require_caller_id(x_user_id: str | None = Header(None)) -> str:
    caller_id = await get_caller_id(x_user_id)
    if not caller_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return caller_id


def check_owner(owner_id: str, caller_id: str | None) -> None:
    if caller_id is not None and owner_id != caller_id:
        raise HTTPException(status_code=403, detail="Unauthorized")
