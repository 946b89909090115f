# dependencies.py
from fastapi import Depends, Request, Response
from hackmate.config import settings
from hackmate.gateway import Gateway
from hackmate.services.profile_session import ProfileSessionController
from hackmate.services.session_registry import SessionRegistry


def get_gateway(request: Request) -> Gateway:
    return request.app.state.gateway


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


async def get_profile_controller(
    request: Request,
    response: Response,
    registry: SessionRegistry = Depends(get_session_registry),
) -> ProfileSessionController:
    cookie_value = request.cookies.get(settings.session_cookie_name)
    session_id, controller = await registry.get_or_create(cookie_value)
    if session_id != cookie_value:
        response.set_cookie(
            settings.session_cookie_name,
            session_id,
            httponly=True,
            samesite="lax",
            secure=settings.environment.lower() == "production",
        )
    return controller
