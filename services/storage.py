"""
Durable client-side key-value storage.

Plays the role browser localStorage plays for the web storefront: a flat
namespace of string keys holding JSON documents, written as full overwrites.
Backed by Redis so every process of the same installation sees the same slot.
"""

import json
import logging
from typing import Any

from redis.asyncio import Redis

import config

logger = logging.getLogger(__name__)


class LocalStorage:

    def __init__(self, redis: Redis, namespace: str | None = None):
        """
        Args:
            redis: Redis client (decode_responses=True is expected)
            namespace: Key prefix isolating this installation's slots
        """
        self.redis = redis
        self.namespace = namespace or config.STORAGE_NAMESPACE

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get_item(self, key: str) -> str | None:
        value = await self.redis.get(self._key(key))
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set_item(self, key: str, value: str) -> None:
        await self.redis.set(self._key(key), value)

    async def remove_item(self, key: str) -> None:
        await self.redis.delete(self._key(key))

    async def get_json(self, key: str) -> Any | None:
        """
        Read and decode a JSON slot.

        Raises:
            ValueError: If the slot holds something that is not JSON
        """
        raw = await self.get_item(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set_json(self, key: str, value: Any) -> None:
        await self.set_item(key, json.dumps(value, ensure_ascii=False))
