from __future__ import annotations

from functools import lru_cache
from typing import IO, Any, Protocol, Type, TypeVar

from pydantic import TypeAdapter

T = TypeVar("T")


class JsonSerializer(Protocol):
    def deserialize_from_stream(self, stream: IO[bytes], target: Type[T]) -> T:
        """Read JSON from a binary stream and return it as an instance of ``target``."""
        ...


@lru_cache(maxsize=None)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


class PydanticJsonSerializer:
    """Default serializer; accepts anything pydantic can validate (models, lists of models, ...)."""

    def deserialize_from_stream(self, stream: IO[bytes], target: Type[T]) -> T:
        return _adapter(target).validate_json(stream.read())
