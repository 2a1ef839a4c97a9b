"""CORS preflight middleware."""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "authorization, x-client-info, apikey, content-type, x-device-id, x-device-signature"
    ),
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
}


class PreflightMiddleware(BaseHTTPMiddleware):
    """Answer every OPTIONS request with an empty 200 and permissive CORS headers.

    Browsers and devices preflight arbitrary paths, so this runs before routing
    and never reaches an endpoint.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        response: Response = await call_next(request)
        return response
