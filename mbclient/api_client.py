from __future__ import annotations

import gzip
import io
import logging
import zlib
from typing import Any, Iterable, List, Optional, Tuple, Type, TypeVar, Union
from uuid import UUID

import httpx

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
from mbclient.serialization import JsonSerializer, PydanticJsonSerializer
from mbclient.streams import GzipResponseStream

logger = logging.getLogger(__name__)

T = TypeVar("T")
Ident = Union[str, UUID]

NIL_ID = str(UUID(int=0))


def query_string(pairs: Iterable[Tuple[str, Any]]) -> str:
    """Join ``key=value`` pairs with ``&``, skipping pairs whose value is None.

    Values are used as-is (no URL encoding): they are ids, names and numbers.
    """
    return "&".join(f"{key}={value}" for key, value in pairs if value is not None)


class ApiClient:
    """
    Read-only MediaBrowser API client.

    Every response body is gzip-compressed JSON, whatever the headers claim.
    Each call opens its own HTTP client and closes it before returning.
    """

    def __init__(
        self,
        api_url: str,
        timeout: float = 30.0,
        serializer: Optional[JsonSerializer] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.serializer = serializer or PydanticJsonSerializer()
        self.transport = transport

    def _url(self, path: str, *pairs: Tuple[str, Any]) -> str:
        query = query_string(pairs)
        return f"{self.api_url}{path}?{query}" if query else f"{self.api_url}{path}"

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport, follow_redirects=True)

    async def _send(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        logger.debug("GET %s", url)
        try:
            r = await client.send(client.build_request("GET", url), stream=True)
        except httpx.HTTPError as exc:
            logger.warning("GET %s failed: %s", url, exc)
            raise TransportError(f"GET {url} failed: {exc}", url) from exc
        if not r.is_success:
            await r.aclose()
            logger.warning("GET %s returned HTTP %s", url, r.status_code)
            raise TransportError(f"GET {url} returned HTTP {r.status_code}", url, status_code=r.status_code)
        return r

    def build_image_url(
        self,
        item_id: Ident,
        image_type: Union[ImageType, str],
        image_index: Optional[int] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        max_width: Optional[int] = None,
        max_height: Optional[int] = None,
        quality: Optional[int] = None,
    ) -> str:
        """Return a url that downloads an image of an item.

        image_index only matters for types with several images (backdrops);
        None or 0 is the first one. width/height force a size and
        max_width/max_height cap it, aspect ratio is preserved either way.
        quality is 0-100 and only applies to JPG.
        """
        return self._url(
            "/image",
            ("id", item_id),
            ("type", image_type),
            ("index", image_index),
            ("width", width),
            ("height", height),
            ("maxWidth", max_width),
            ("maxHeight", max_height),
            ("quality", quality),
        )

    async def fetch_and_decode(self, url: str, target: Type[T]) -> T:
        """GET url, gunzip the body and decode its JSON as ``target``."""
        async with self._http_client() as client:
            r = await self._send(client, url)
            try:
                # Raw bytes: the gzip layer is ours to undo, not httpx's.
                raw = b"".join([chunk async for chunk in r.aiter_raw()])
            except httpx.HTTPError as exc:
                logger.warning("Reading %s failed: %s", url, exc)
                raise TransportError(f"reading {url} failed: {exc}", url) from exc
            finally:
                await r.aclose()

        try:
            with gzip.GzipFile(fileobj=io.BytesIO(raw), mode="rb") as body:
                return self.serializer.deserialize_from_stream(body, target)
        except (OSError, EOFError, zlib.error, ValueError) as exc:
            logger.warning("Could not decode response from %s: %s", url, exc)
            raise DecodeError(f"could not decode response from {url}: {exc}", url) from exc

    async def get_image_stream(self, url: str) -> GzipResponseStream:
        """GET url and hand back the decompressed body. The caller must close it."""
        client = self._http_client()
        try:
            r = await self._send(client, url)
        except BaseException:
            await client.aclose()
            raise
        return GzipResponseStream(client, r, url)

    async def get_item(self, item_id: Optional[Ident], user_id: Ident) -> ApiBaseItemWrapper:
        # No id means the user's root folder.
        if item_id is not None and str(item_id) in ("", NIL_ID):
            item_id = None
        url = self._url("/item", ("userId", user_id), ("id", item_id))
        return await self.fetch_and_decode(url, ApiBaseItemWrapper)

    async def get_all_users(self) -> List[User]:
        return await self.fetch_and_decode(self._url("/users"), List[User])

    async def get_all_genres(self, user_id: Ident) -> List[CategoryInfo[Genre]]:
        url = self._url("/genres", ("userId", user_id))
        return await self.fetch_and_decode(url, List[CategoryInfo[Genre]])

    async def get_genre(self, name: str, user_id: Ident) -> CategoryInfo[Genre]:
        url = self._url("/genre", ("userId", user_id), ("name", name))
        return await self.fetch_and_decode(url, CategoryInfo[Genre])

    async def get_all_studios(self, user_id: Ident) -> List[CategoryInfo[Studio]]:
        url = self._url("/studios", ("userId", user_id))
        return await self.fetch_and_decode(url, List[CategoryInfo[Studio]])

    async def get_studio(self, name: str, user_id: Ident) -> CategoryInfo[Studio]:
        url = self._url("/studio", ("userId", user_id), ("name", name))
        return await self.fetch_and_decode(url, CategoryInfo[Studio])

    async def get_user_configuration(self, user_id: Ident) -> UserConfiguration:
        url = self._url("/userconfiguration", ("userId", user_id))
        return await self.fetch_and_decode(url, UserConfiguration)
