from typing import Optional
from fastapi import Header

SYSTEM_USER = "system"

def get_user_identifier(x_user_id: Optional[str] = Header(None)) -> str:
    """
    Identify the operator behind a request.

    Authentication happens upstream; the gateway forwards the authenticated
    user in the X-User-ID header. Requests without it are attributed to the
    system user.
    """
    if not x_user_id or not x_user_id.strip():
        return SYSTEM_USER
    return x_user_id.strip()
