import gzip
import json

import httpx

BASE = "http://mb.test/mediabrowser/api"


class BodyStream(httpx.AsyncByteStream):
    """Response body served in small chunks, remembering whether it was closed."""

    def __init__(self, body: bytes, chunk_size: int = 16) -> None:
        self.body = body
        self.chunk_size = chunk_size
        self.closed = False

    async def __aiter__(self):
        for i in range(0, len(self.body), self.chunk_size):
            yield self.body[i:i + self.chunk_size]

    async def aclose(self) -> None:
        self.closed = True


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps the requested urls and notices when its client closes."""

    def __init__(self, handler) -> None:
        self.urls = []
        self.closed = False

        def record(request):
            self.urls.append(str(request.url))
            return handler(request)

        super().__init__(record)

    async def aclose(self) -> None:
        self.closed = True


def gzipped_json(value) -> bytes:
    return gzip.compress(json.dumps(value).encode("utf-8"))


def serve(body: bytes, status_code: int = 200, headers=None):
    """Transport answering every request with ``body``; returns (transport, list of body streams)."""
    streams = []

    def handler(request):
        stream = BodyStream(body)
        streams.append(stream)
        return httpx.Response(status_code, headers=headers, stream=stream)

    return RecordingTransport(handler), streams
