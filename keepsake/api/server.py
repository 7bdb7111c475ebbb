"""Async HTTP server exposing the query facade.

Uses aiohttp's AppRunner/TCPSite for non-blocking start/stop.  Uploaded
photos are served read-only from the upload directory under the same URL
prefix the stored references use.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from aiohttp import web

from keepsake.api.facade import QueryFacade
from keepsake.config import settings
from keepsake.content.store import ContentStore
from keepsake.dates import DayCounter
from keepsake.errors import KeepsakeError, ValidationRejected
from keepsake.uploads import PhotoStorage

logger = logging.getLogger(__name__)

FACADE_KEY = web.AppKey("facade", QueryFacade)

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

# Multipart framing overhead allowed on top of the photo size limit.
_UPLOAD_SLACK_BYTES = 1024 * 1024


# -- Middleware -----------------------------------------------------------------


@web.middleware
async def _cors_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Allow cross-origin calls from the web client."""
    if request.method == "OPTIONS":
        response: web.StreamResponse = web.Response(status=204)
    else:
        response = await handler(request)
    response.headers["Access-Control-Allow-Origin"] = settings.cors_allow_origin
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return response


@web.middleware
async def _error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Map domain errors to JSON responses with their HTTP status."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except KeepsakeError as exc:
        if exc.status >= 500:
            logger.exception("%s %s failed: %s", request.method, request.path, exc.message)
        else:
            logger.warning(
                "%s %s rejected (%d): %s", request.method, request.path, exc.status, exc.message
            )
        return web.json_response(exc.to_payload(), status=exc.status)
    except Exception:
        logger.exception("Unhandled error: %s %s", request.method, request.path)
        return web.json_response({"error": "internal error"}, status=500)


# -- Helpers --------------------------------------------------------------------


async def _read_body(request: web.Request) -> Any:
    """Decode a JSON or form-encoded request body."""
    if request.content_type in _FORM_TYPES:
        form = await request.post()
        return {key: value for key, value in form.items() if isinstance(value, str)}
    if not request.body_exists:
        return {}
    try:
        return await request.json()
    except json.JSONDecodeError as exc:
        msg = "invalid JSON"
        raise ValidationRejected(msg) from exc


def _facade(request: web.Request) -> QueryFacade:
    return request.app[FACADE_KEY]


# -- Handlers -------------------------------------------------------------------


async def _health(request: web.Request) -> web.Response:
    """GET /health — basic liveness check."""
    return web.json_response({"status": "ok"})


async def _love_day(request: web.Request) -> web.Response:
    return web.json_response(_facade(request).love_day())


async def _love_day_count(request: web.Request) -> web.Response:
    return web.json_response(_facade(request).days_together())


async def _recent_memories(request: web.Request) -> web.Response:
    return web.json_response(await _facade(request).recent_memories())


async def _create_memory(request: web.Request) -> web.Response:
    body = await _read_body(request)
    return web.json_response(await _facade(request).create_memory(body))


async def _list_events(request: web.Request) -> web.Response:
    return web.json_response(await _facade(request).list_milestones())


async def _create_event(request: web.Request) -> web.Response:
    body = await _read_body(request)
    return web.json_response(await _facade(request).create_milestone(body))


async def _create_notification(request: web.Request) -> web.Response:
    body = await _read_body(request)
    return web.json_response(await _facade(request).create_notification(body))


async def _create_album(request: web.Request) -> web.Response:
    body = await _read_body(request)
    return web.json_response(await _facade(request).create_album(body))


async def _attach_photo(request: web.Request) -> web.Response:
    """POST /albums/{id}/photos — multipart upload in the ``photo`` field."""
    album_id = request.match_info["album_id"]
    data: bytes | None = None
    filename: str | None = None
    if request.content_type == "multipart/form-data":
        form = await request.post()
        field = form.get("photo")
        if isinstance(field, web.FileField):
            data = field.file.read()
            filename = field.filename
    return web.json_response(await _facade(request).attach_photo(album_id, data, filename))


# -- Application ----------------------------------------------------------------


def create_facade(
    store: ContentStore | None = None,
    photos: PhotoStorage | None = None,
    counter: DayCounter | None = None,
) -> QueryFacade:
    """Wire the facade to the store, photo storage and day counter.

    Unset collaborators default to the shared instances and a counter
    anchored at LOVE_DAY.
    """
    return QueryFacade(
        store=store or ContentStore.get(),
        counter=counter or DayCounter(settings.get_love_day()),
        photos=photos or PhotoStorage.get(),
    )


def _create_web_app(facade: QueryFacade, photos: PhotoStorage | None = None) -> web.Application:
    """Build the aiohttp Application with routes."""
    photos = photos or PhotoStorage.get()
    app = web.Application(
        middlewares=[_cors_middleware, _error_middleware],
        client_max_size=settings.max_upload_bytes + _UPLOAD_SLACK_BYTES,
    )
    app[FACADE_KEY] = facade

    app.router.add_get("/health", _health)
    app.router.add_get("/love-day", _love_day)
    app.router.add_get("/love-day/count", _love_day_count)
    app.router.add_get("/memories/recent", _recent_memories)
    app.router.add_post("/memories", _create_memory)
    app.router.add_get("/events", _list_events)
    app.router.add_post("/events", _create_event)
    app.router.add_post("/notifications", _create_notification)
    app.router.add_post("/albums", _create_album)
    app.router.add_post("/albums/{album_id}/photos", _attach_photo)
    app.router.add_static(photos.url_prefix, photos.root)
    return app


class ApiServer:
    """Manages the aiohttp server lifecycle."""

    def __init__(
        self,
        store: ContentStore | None = None,
        photos: PhotoStorage | None = None,
        host: str | None = None,
        port: int | None = None,
    ) -> None:
        self.store = store or ContentStore.get()
        self.photos = photos or PhotoStorage.get()
        self.facade = create_facade(self.store, self.photos)
        self.host = host or settings.host
        self.port = port if port is not None else settings.port
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Check the database, then start listening."""
        await self.store.check()

        app = _create_web_app(self.facade, self.photos)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("API server listening on %s:%d", self.host, self.port)

    async def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("API server stopped")
