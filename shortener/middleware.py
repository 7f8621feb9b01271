"""
Request decompression for the Shortener Platform.

Responses are compressed by starlette's ``GZipMiddleware``; this module covers
the other direction: clients may send ``Content-Encoding: gzip`` bodies.
``GzipRequestMiddleware`` buffers such a body, inflates it and hands the
application a plain request, so route handlers and pydantic parsing never see
compressed bytes.
"""

import gzip
import zlib

from starlette.datastructures import Headers
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send


class GzipRequestMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        encoding = Headers(scope=scope).get("content-encoding", "")
        if "gzip" not in encoding.lower():
            await self.app(scope, receive, send)
            return

        chunks = []
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break

        try:
            body = gzip.decompress(b"".join(chunks))
        except (OSError, EOFError, zlib.error):
            response = PlainTextResponse("Cannot decompress request body", status_code=400)
            await response(scope, receive, send)
            return

        headers = [
            (name, value)
            for name, value in scope["headers"]
            if name not in (b"content-encoding", b"content-length")
        ]
        headers.append((b"content-length", str(len(body)).encode("latin-1")))
        scope = dict(scope, headers=headers)

        delivered = False

        async def inflated_receive() -> Message:
            nonlocal delivered
            if not delivered:
                delivered = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, inflated_receive, send)
