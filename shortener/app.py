"""
HTTP API module for the Shortener Platform.

Responsibilities:
    - Expose the shortening, redirect, per-user listing/deletion and health
      endpoints
    - Resolve the caller's anonymous identity from the signed `auth` cookie,
      issuing a fresh one when absent or invalid
    - Map storage outcomes to fixed status codes without leaking backend text

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - Storage comes from the factory (memory or postgres) unless injected.
    - LinkManager owns validation and rendering; routes stay thin.

Status mapping:
    NotFoundError -> 404, DeletedError -> 410, ConflictError -> 409,
    malformed URL -> 400, any other StoreError (incl. failed ping) -> 500.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import BackgroundTasks, Body, Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from auth import config as auth_config
from auth.dependencies import get_current_user
from auth.service import encode_uid, resolve_identity
from shortener.config import settings
from shortener.manager.link_manager import LinkManager
from shortener.middleware import GzipRequestMiddleware
from shortener.schemas import (
    BatchShortenRequest,
    BatchShortenResponse,
    ShortenRequest,
    URLResponse,
)
from shortener.storage.base import AuthStorage
from shortener.storage.errors import DeletedError, NotFoundError, StoreError
from shortener.storage.storage_factory import get_storage


def create_app(
    storage: Optional[AuthStorage] = None,
    base_url: Optional[str] = None,
    auth_secret: Optional[str] = None,
) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage: Backend to use; defaults to ``get_storage()`` (env driven).
        base_url: Prefix for rendered short URLs; defaults to BASE_URL.
        auth_secret: Cookie signing key; defaults to AUTH_SECRET.

    Returns:
        FastAPI: A configured application. Its storage is closed on shutdown.
    """
    log = logging.getLogger("shortener")

    # basic console logging (optional)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    storage = storage if storage is not None else get_storage()
    manager = LinkManager(storage=storage, base_url=base_url or settings.BASE_URL)
    secret = auth_secret or auth_config.SECRET

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        storage.close()
        log.info("storage closed")

    app = FastAPI(
        title="Shortener Platform",
        description="URL shortener with anonymous per-browser ownership and soft deletion",
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.storage = storage
    app.state.manager = manager

    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(GzipRequestMiddleware)

    log.info("Shortener storage backend: %s", type(storage).__name__)

    # ----------------------------------------------------------------
    # Identity & error mapping
    # ----------------------------------------------------------------
    @app.middleware("http")
    async def identity(request: Request, call_next):
        uid, issued = resolve_identity(request.cookies.get(auth_config.COOKIE_NAME), secret)
        request.state.user_id = uid
        response = await call_next(request)
        if issued:
            response.set_cookie(
                auth_config.COOKIE_NAME, encode_uid(uid, secret), httponly=True, samesite="lax"
            )
        return response

    @app.exception_handler(NotFoundError)
    async def not_found(_request: Request, _exc: NotFoundError):
        return PlainTextResponse("Not found", status_code=404)

    @app.exception_handler(DeletedError)
    async def gone(_request: Request, _exc: DeletedError):
        return PlainTextResponse("Gone", status_code=410)

    @app.exception_handler(StoreError)
    async def store_failure(_request: Request, exc: StoreError):
        log.warning("storage failure: %s", exc, exc_info=exc.__cause__ is not None)
        return PlainTextResponse("Internal server error", status_code=500)

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/ping")
    def ping():
        """Health check; a failing backend surfaces as 500 via the StoreError handler."""
        manager.ping()
        return {"status": "ok"}

    @app.post("/")
    async def shorten_text(request: Request, user_id: uuid.UUID = Depends(get_current_user)):
        """Shorten a URL sent as the raw request body; responds with the short URL as text."""
        raw = (await request.body()).decode("utf-8", errors="replace")
        try:
            outcome = await run_in_threadpool(manager.shorten, raw, user_id)
        except ValueError as ve:
            return PlainTextResponse(str(ve), status_code=400)
        return PlainTextResponse(outcome.short_url, status_code=409 if outcome.conflict else 201)

    @app.post("/api/shorten")
    def shorten_json(req: ShortenRequest, user_id: uuid.UUID = Depends(get_current_user)):
        """
        Shorten ``{"url": ...}``; responds ``{"result": short_url}``.

        201 for a fresh link, 409 (same body shape) when the URL was already
        shortened.
        """
        try:
            outcome = manager.shorten(req.url, user_id)
        except ValueError as ve:
            raise HTTPException(status_code=400, detail=str(ve))
        return JSONResponse(
            {"result": outcome.short_url}, status_code=409 if outcome.conflict else 201
        )

    @app.post("/api/shorten/batch", status_code=201, response_model=List[BatchShortenResponse])
    def shorten_batch(
        items: List[BatchShortenRequest], user_id: uuid.UUID = Depends(get_current_user)
    ):
        try:
            return manager.shorten_batch(user_id, items)
        except ValueError as ve:
            raise HTTPException(status_code=400, detail=str(ve))

    @app.get("/api/user/urls", response_model=List[URLResponse])
    def user_urls(user_id: uuid.UUID = Depends(get_current_user)):
        """List the caller's active links; 204 when there are none."""
        urls = manager.user_urls(user_id)
        if not urls:
            return Response(status_code=204)
        return urls

    @app.delete("/api/user/urls", status_code=202)
    def delete_user_urls(
        background: BackgroundTasks,
        ids: List[str] = Body(...),
        user_id: uuid.UUID = Depends(get_current_user),
    ):
        """
        Accept a soft-delete request for the caller's identifiers.

        Deletion runs after the response is sent; ids the caller does not own
        are ignored by the storage layer.
        """

        def _delete() -> None:
            try:
                manager.delete_user_urls(user_id, ids)
            except StoreError:
                log.exception("background delete failed for owner=%s", user_id)

        background.add_task(_delete)
        return Response(status_code=202)

    @app.get("/{id}")
    def expand(id: str):
        """Redirect to the original URL (307); 404 unknown, 410 deleted."""
        return RedirectResponse(url=manager.expand(id), status_code=307)

    return app
