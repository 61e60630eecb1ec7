from __future__ import annotations

import logging
import os
from typing import AsyncIterator, List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse

from mbclient.api_client import ApiClient
from mbclient.exceptions import DecodeError, TransportError
from mbclient.models import (
    ApiBaseItemWrapper,
    CategoryInfo,
    Genre,
    ImageType,
    Studio,
    User,
    UserConfiguration,
)
from mbclient.streams import GzipResponseStream


MEDIABROWSER_URL = os.environ.get("MEDIABROWSER_URL", "").strip()
MEDIABROWSER_TIMEOUT = float(os.environ.get("MEDIABROWSER_TIMEOUT", "30"))

if not MEDIABROWSER_URL:
    raise RuntimeError("Missing required env var: MEDIABROWSER_URL")

client = ApiClient(MEDIABROWSER_URL, timeout=MEDIABROWSER_TIMEOUT)

app = FastAPI(title="MediaBrowser Library Browser")

logger = logging.getLogger("mediabrowser-browser")


@app.exception_handler(TransportError)
async def _transport_error(request: Request, exc: TransportError) -> JSONResponse:
    logger.warning("MediaBrowser: request failed for %s", exc.url, exc_info=exc)
    # Pass a missing upstream resource through; everything else is a bad gateway.
    status = 404 if exc.status_code == 404 else 502
    return JSONResponse({"error": str(exc)}, status_code=status)


@app.exception_handler(DecodeError)
async def _decode_error(request: Request, exc: DecodeError) -> JSONResponse:
    logger.warning("MediaBrowser: undecodable response from %s", exc.url, exc_info=exc)
    return JSONResponse({"error": str(exc)}, status_code=502)


async def _relay(stream: GzipResponseStream) -> AsyncIterator[bytes]:
    try:
        async for chunk in stream:
            yield chunk
    finally:
        await stream.aclose()


class UpstreamImageResponse(StreamingResponse):
    """Relays an upstream image; the upstream stream is closed however sending ends."""

    def __init__(self, stream: GzipResponseStream) -> None:
        media_type = stream.headers.get("content-type") or "application/octet-stream"
        super().__init__(_relay(stream), media_type=media_type)
        self.upstream = stream

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.upstream.aclose()


@app.get("/api/users")
async def users() -> List[User]:
    return await client.get_all_users()


@app.get("/api/users/{user_id}/configuration")
async def user_configuration(user_id: str) -> UserConfiguration:
    return await client.get_user_configuration(user_id)


@app.get("/api/users/{user_id}/item")
async def item(user_id: str, id: Optional[str] = None) -> ApiBaseItemWrapper:
    """Return one item for the user, or the user's root folder when no id is given."""
    return await client.get_item(id, user_id)


@app.get("/api/users/{user_id}/genres")
async def genres(user_id: str) -> List[CategoryInfo[Genre]]:
    return await client.get_all_genres(user_id)


@app.get("/api/users/{user_id}/genres/{name}")
async def genre(user_id: str, name: str) -> CategoryInfo[Genre]:
    return await client.get_genre(name, user_id)


@app.get("/api/users/{user_id}/studios")
async def studios(user_id: str) -> List[CategoryInfo[Studio]]:
    return await client.get_all_studios(user_id)


@app.get("/api/users/{user_id}/studios/{name}")
async def studio(user_id: str, name: str) -> CategoryInfo[Studio]:
    return await client.get_studio(name, user_id)


@app.get("/api/image/{item_id}")
async def image(
    item_id: str,
    type: ImageType = ImageType.PRIMARY,
    index: Optional[int] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
    max_width: Optional[int] = Query(None, alias="maxWidth"),
    max_height: Optional[int] = Query(None, alias="maxHeight"),
    quality: Optional[int] = Query(None, ge=0, le=100),
):
    """Proxy an image from the server, decompressed."""
    url = client.build_image_url(
        item_id,
        type,
        image_index=index,
        width=width,
        height=height,
        max_width=max_width,
        max_height=max_height,
        quality=quality,
    )
    return UpstreamImageResponse(await client.get_image_stream(url))
