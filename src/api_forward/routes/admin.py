"""Admin session cookie issue and removal."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from api_forward.errors import make_error_response
from api_forward.models.config import AdminConfig


class AdminLogin(BaseModel):
    token: str = ""


def create_admin_router(admin: AdminConfig) -> APIRouter:
    router = APIRouter()

    @router.post("/admin-auth")
    async def admin_auth(login: AdminLogin) -> JSONResponse:
        if login.token != admin.token:
            return make_error_response(401, "Invalid admin token")
        response = JSONResponse({"success": True})
        response.set_cookie(
            admin.cookie_name,
            login.token,
            max_age=admin.cookie_max_age,
            httponly=True,
            samesite="strict",
        )
        return response

    @router.get("/admin-logout")
    async def admin_logout() -> RedirectResponse:
        response = RedirectResponse("/admin-login", status_code=302)
        response.delete_cookie(admin.cookie_name)
        return response

    return router
