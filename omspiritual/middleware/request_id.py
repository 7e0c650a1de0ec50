"""
OM Spiritual Backend - Request ID Middleware
=============================================

What:  Gives each request a short correlation id, exposes it through a
       ContextVar for loggers and exception handlers, and echoes it in the
       X-Request-ID response header.
How:   A client-supplied X-Request-ID is reused (frontend → backend tracing);
       otherwise the first 8 characters of a UUID4.

Written as a plain ASGI middleware rather than BaseHTTPMiddleware: the id is
set in the caller's context, so the catch-all 500 handler (which runs in
Starlette's ServerErrorMiddleware, outside every user middleware) still
sees it. That handler adds the header itself; see main._error_response.
"""

import uuid
from contextvars import ContextVar

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"
MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware:

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        rid = Headers(scope=scope).get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]
        # Bound what a client can push into our logs
        rid = rid[:MAX_CLIENT_ID_LENGTH]

        request_id_var.set(rid)
        scope.setdefault("state", {})["request_id"] = rid

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = rid
            await send(message)

        await self.app(scope, receive, send_with_request_id)
