from __future__ import annotations

import logging
import zlib
from typing import AsyncIterator

import httpx

from mbclient.exceptions import DecodeError, TransportError

logger = logging.getLogger(__name__)


class GzipResponseStream:
    """
    Decompressed view over a streaming response.

    Owned by whoever received it: closing releases both the response and the
    HTTP client that produced it.
    """

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response, url: str) -> None:
        self.url = url
        self._client = client
        self._response = response
        # 16 + MAX_WBITS: expect a gzip header and trailer.
        self._decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
        self._closed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def closed(self) -> bool:
        return self._closed

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_raw():
                data = self._decompress(chunk)
                if data:
                    yield data
        except httpx.HTTPError as exc:
            logger.warning("Reading %s failed", self.url)
            raise TransportError(f"reading {self.url} failed: {exc}", self.url) from exc
        if not self._decompressor.eof:
            raise DecodeError(f"gzip body from {self.url} is truncated", self.url)
        tail = self._decompressor.flush()
        if tail:
            yield tail

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self.iter_bytes()

    async def aread(self) -> bytes:
        return b"".join([chunk async for chunk in self.iter_bytes()])

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()

    async def __aenter__(self) -> "GzipResponseStream":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _decompress(self, chunk: bytes) -> bytes:
        # A body may hold several gzip members back to back, like GzipFile reads them.
        out = []
        while chunk:
            if self._decompressor.eof:
                chunk = chunk.lstrip(b"\x00")
                if not chunk:
                    break
                self._decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
            try:
                out.append(self._decompressor.decompress(chunk))
            except zlib.error as exc:
                raise DecodeError(f"body from {self.url} is not gzip: {exc}", self.url) from exc
            chunk = self._decompressor.unused_data
        return b"".join(out)
