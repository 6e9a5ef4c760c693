"""Shared-secret admin cookie check for the configuration API."""

from fastapi import Request, Response
from starlette.responses import JSONResponse

from api_forward.models.config import AdminConfig

PROTECTED_PREFIXES = ("/config",)


def get_admin_token(request: Request, cookie_name: str) -> str | None:
    """Extract the admin token from the request cookies."""
    return request.cookies.get(cookie_name)


def is_protected(path: str) -> bool:
    """True for paths that need an admin session."""
    return any(
        path == prefix or path.startswith(prefix + "/") for prefix in PROTECTED_PREFIXES
    )


def make_auth_error_response() -> JSONResponse:
    """Create the unauthorized response."""
    return JSONResponse(status_code=401, content={"error": "Unauthorized"})


class AdminAuth:
    """Admin cookie middleware guarding the configuration API."""

    def __init__(self, admin: AdminConfig):
        """
        Initialize auth middleware.

        Args:
            admin: Token and cookie name to check against.
        """
        self.admin = admin

    async def __call__(self, request: Request, call_next) -> Response:
        """Check the admin cookie on protected paths only."""
        if not is_protected(request.url.path):
            return await call_next(request)

        if get_admin_token(request, self.admin.cookie_name) != self.admin.token:
            return make_auth_error_response()

        return await call_next(request)
