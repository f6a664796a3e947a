"""Application middleware."""

import asyncio
import logging
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.logging import request_id_var

logger = logging.getLogger(__name__)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Extracts or generates a request correlation ID for every request.

    Behaviour:
    - If the client sends an ``X-Request-ID`` header, that value is reused.
    - Otherwise a fresh UUID4 hex string is generated.
    - The ID is stored in ``request.state.request_id``, injected into the
      ``request_id_var`` ContextVar (so all loggers pick it up automatically),
      and echoed back in the ``X-Request-ID`` response header.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            request_id_var.reset(token)


class RequestTimeoutMiddleware:
    """Cancels a request that runs past ``timeout_s`` and answers 504.

    Written as plain ASGI so the endpoint runs inside the timeout's own task:
    cancellation reaches every pending database call, and the session
    dependency rolls the request's transaction back.
    """

    def __init__(self, app: ASGIApp, timeout_s: float) -> None:
        self.app = app
        self.timeout_s = timeout_s

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            async with asyncio.timeout(self.timeout_s):
                await self.app(scope, receive, send_wrapper)
        except TimeoutError:
            logger.error(
                "Request timed out",
                extra={"path": scope.get("path"), "timeout_s": self.timeout_s},
            )
            if response_started:
                raise
            response = JSONResponse(
                status_code=504,
                content={
                    "error": {
                        "code": "REQUEST_TIMEOUT",
                        "message": f"Request exceeded {self.timeout_s}s",
                        "details": None,
                    }
                },
            )
            await response(scope, receive, send)
