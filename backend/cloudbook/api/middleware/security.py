from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from cloudbook.utils.logging import get_logger

if TYPE_CHECKING:
    from fastapi import Request
    from starlette.types import ASGIApp

    from cloudbook.config import Settings

logger = get_logger(__name__)

HSTS_VALUE = "max-age=15552000; includeSubDomains"


def build_csp(settings: Settings) -> str:
    """Content policy for API responses; the browser may only call us and the Supabase project."""
    connect_src = ["'self'"]
    if settings.supabase_url:
        connect_src.append(settings.supabase_url.rstrip("/"))
    return "; ".join(
        [
            "default-src 'none'",
            f"connect-src {' '.join(connect_src)}",
            "frame-ancestors 'none'",
            "base-uri 'none'",
        ]
    )


class SecurityMiddleware(BaseHTTPMiddleware):
    """Adds security headers to every response and logs access to the auth endpoints.

    Note payloads are private to one user, so API responses are never cached.
    """

    def __init__(self, app: ASGIApp, settings: Settings):
        super().__init__(app)
        self.api_prefix = settings.api_prefix
        self.auth_path_prefix = f"{settings.api_prefix}/auth"
        self.force_hsts = settings.environment == "production"
        self.static_headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "no-referrer",
            "Content-Security-Policy": build_csp(settings),
        }

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers.update(self.static_headers)
        if self.force_hsts or request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = HSTS_VALUE

        path = request.url.path
        if path.startswith(self.api_prefix):
            response.headers["Cache-Control"] = "no-store"
            response.headers["Pragma"] = "no-cache"

        if path.startswith(self.auth_path_prefix):
            user_agent = request.headers.get("user-agent", "unknown")
            logger.info(
                "Auth endpoint accessed",
                extra={
                    "path": path,
                    "method": request.method,
                    "status_code": response.status_code,
                    "ip": request.client.host if request.client else "unknown",
                    "user_agent": user_agent[:100],
                }
            )

        return response
