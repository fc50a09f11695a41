from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ratemystore.auth.utils import ACCESS_TOKEN, decode_token
from ratemystore.core.errors import UnauthenticatedError


def bearer_token(request: Request) -> Optional[str]:
    auth: Optional[str] = request.headers.get("Authorization")
    if auth and auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


class AuthMiddleware(BaseHTTPMiddleware):
    """Attach the access token's subject to request.state.user.

    Missing or invalid tokens leave request.state.user as None; whether that
    is acceptable is decided per operation by the authorization policy.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.user = None

        token = bearer_token(request)
        if token:
            try:
                request.state.user = {"id": decode_token(token, ACCESS_TOKEN)}
            except UnauthenticatedError:
                request.state.user = None

        response = await call_next(request)
        return response
