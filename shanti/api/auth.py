"""
Authentication API endpoint.

A single ``/auth`` route; the ``action`` query parameter selects the handler:

- ``POST /auth?action=login``     body ``{username, password}``
- ``POST /auth?action=logout``    body ``{token}``
- ``GET  /auth?action=verify&token=...``
- ``POST /auth?action=register``  body ``{username, email, password}``
"""

import json
import logging
from typing import Awaitable, Callable, Dict, Tuple

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from ..core.errors import AuthAPIError
from ..models import LoginRequest, LogoutRequest, RegisterRequest
from ..services import AuthService
from ..storage import get_user_storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])

ActionHandler = Callable[[Request, AuthService], Awaitable[JSONResponse]]


def get_auth_service() -> AuthService:
    """Dependency providing the auth service over the global credential store."""
    return AuthService(get_user_storage())


async def _read_body(request: Request) -> object:
    """Parse the JSON body; anything unparsable reads as an empty payload."""
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}


async def handle_login(request: Request, service: AuthService) -> JSONResponse:
    payload = LoginRequest.from_body(await _read_body(request))
    result = await service.login(payload)
    return JSONResponse(content=result.model_dump())


async def handle_logout(request: Request, service: AuthService) -> JSONResponse:
    payload = LogoutRequest.from_body(await _read_body(request))
    result = await service.logout(payload)
    return JSONResponse(content=result.model_dump())


async def handle_verify(request: Request, service: AuthService) -> JSONResponse:
    result = await service.verify(request.query_params.get("token"))
    if not result.valid:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"valid": False})
    return JSONResponse(content=result.model_dump())


async def handle_register(request: Request, service: AuthService) -> JSONResponse:
    payload = RegisterRequest.from_body(await _read_body(request))
    result = await service.register(payload)
    return JSONResponse(content=result.model_dump())


# action -> (HTTP method, handler)
ACTIONS: Dict[str, Tuple[str, ActionHandler]] = {
    "login": ("POST", handle_login),
    "logout": ("POST", handle_logout),
    "verify": ("GET", handle_verify),
    "register": ("POST", handle_register),
}


@router.api_route("/auth", methods=["GET", "POST"])
async def auth_endpoint(
    request: Request,
    action: str = Query("", description="One of: login, logout, verify, register"),
    service: AuthService = Depends(get_auth_service),
):
    """
    Dispatch an auth action.

    Returns:
        JSONResponse: The action's result, or ``{"error": ...}``
    """
    entry = ACTIONS.get(action)
    if entry is None:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid action"})

    method, handler = entry
    if request.method != method:
        return JSONResponse(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            content={"error": "Method not allowed"},
            headers={"Allow": method},
        )

    try:
        return await handler(request, service)
    except AuthAPIError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error handling action {action}: {e}", exc_info=True)
        raise AuthAPIError("Server error") from e
