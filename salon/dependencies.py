"""FastAPI dependencies for resolving the calling user."""

from typing import Any

from fastapi import Depends, Request

from salon.services.auth_service import auth_service


def _token_from_request(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer ") :].strip() or None
    return request.cookies.get("token")


def get_current_user(request: Request) -> dict[str, Any]:
    return auth_service.authenticate(_token_from_request(request))


def get_optional_user(request: Request) -> dict[str, Any] | None:
    return auth_service.authenticate_optional(_token_from_request(request))


def require_admin(user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    return auth_service.require_admin(user)
