from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client-IP limit using the limiter on ``app.state.rate_limiter``.

    Requests pass straight through while no limiter is configured. A limiter
    backend failure lets the request through rather than failing it.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        limiter = getattr(request.app.state, "rate_limiter", None)
        if limiter is None:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        try:
            allowed = await limiter.hit(client_ip)
        except Exception:
            logger.exception("Rate limiter unavailable, allowing %s", client_ip)
            allowed = True

        if not allowed:
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests. Please try again later."},
            )
        return await call_next(request)
