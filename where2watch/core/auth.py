"""Admin PIN middleware.

Enabled only when ADMIN_PIN is set. Reads are always public; any other
method under /api must carry the PIN in the X-Admin-Pin header.
"""

import secrets

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response

from where2watch.core.config import get_settings

PIN_HEADER = "X-Admin-Pin"
SAFE_METHODS = ("GET", "HEAD", "OPTIONS")


class AdminPinMiddleware(BaseHTTPMiddleware):
    """Middleware that gates write requests behind the admin PIN."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        settings = get_settings()

        # Skip the check if no PIN is configured
        if settings.admin_pin is None:
            return await call_next(request)

        if request.method in SAFE_METHODS or not request.url.path.startswith("/api"):
            return await call_next(request)

        # Viewing a page is not an admin action
        if request.url.path.endswith("/views"):
            return await call_next(request)

        pin = request.headers.get(PIN_HEADER)
        if pin is None:
            return self._unauthorized()

        # Constant-time comparison (using bytes)
        pin_ok = secrets.compare_digest(
            pin.encode("utf-8"),
            settings.admin_pin.get_secret_value().encode("utf-8"),
        )
        if not pin_ok:
            return self._unauthorized()

        request.state.is_admin = True
        return await call_next(request)

    @staticmethod
    def _unauthorized() -> Response:
        return JSONResponse(content={"detail": "Admin PIN required"}, status_code=401)
