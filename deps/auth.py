import os
from typing import Annotated

from fastapi import Header, HTTPException


def require_admin(
    x_admin_token: Annotated[str | None, Header(alias="x-admin-token")] = None,
) -> None:
    """
    Admin-only guard. Requires the X-Admin-Token header to match ADMIN_TOKEN.
    """
    admin_token = os.getenv("ADMIN_TOKEN", "")
    if not admin_token:
        raise HTTPException(status_code=500, detail="ADMIN_TOKEN not configured on server.")
    if x_admin_token != admin_token:
        raise HTTPException(status_code=401, detail="Unauthorized.")


def require_client(
    x_api_key: Annotated[str | None, Header(alias="x-api-key")] = None,
    x_admin_token: Annotated[str | None, Header(alias="x-admin-token")] = None,
) -> None:
    """
    Exam-session guard. Accepts either a matching X-Admin-Token or an
    X-Api-Key matching EXAM_API_KEY.
    """
    admin_token = os.getenv("ADMIN_TOKEN", "")
    if admin_token and x_admin_token == admin_token:
        return

    api_key = os.getenv("EXAM_API_KEY", "")
    if not api_key:
        raise HTTPException(status_code=500, detail="EXAM_API_KEY not configured on server.")
    if x_api_key != api_key:
        raise HTTPException(status_code=401, detail="Unauthorized.")
