"""
CSRF token middleware.
Issues the double-submit token cookie and exposes the token to the templates.
"""

from typing import Callable
import secrets
import logging
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from realty.config import settings

logger = logging.getLogger(__name__)


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Makes sure every client holds a CSRF cookie.
    The token is checked against submitted values by the verify_csrf dependency.
    """

    def __init__(self, app: ASGIApp, cookie_name: str = None, secure: bool = False):
        super().__init__(app)
        self.cookie_name = cookie_name or settings.csrf_cookie_name
        self.secure = secure

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        token = request.cookies.get(self.cookie_name)
        issued = not token
        if issued:
            token = secrets.token_urlsafe(32)

        request.state.csrf_token = token

        response = await call_next(request)

        if issued:
            response.set_cookie(
                self.cookie_name,
                token,
                httponly=True,
                samesite="lax",
                secure=self.secure,
            )
            logger.debug(f"Issued CSRF cookie for {request.url.path}")

        return response
