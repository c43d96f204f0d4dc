"""
Redis Streams backed ticket log.

XADD appends, XREAD BLOCK reads after a cursor. Entry ids (`<ms>-<seq>`)
are the position tokens.
"""

import logging
from typing import Any, Dict, List, Optional

from redis.asyncio import Redis

from .base import EARLIEST_POSITION, LogEntry, TicketLog

logger = logging.getLogger(__name__)


def _parse_xread(response: Any, stream: str) -> List[LogEntry]:
    if not response:
        return []
    if isinstance(response, dict):
        # RESP3: {stream: [[(id, fields), ...]]}, the entry list is wrapped once per stream
        wrapped = response.get(stream) or [[]]
        messages = wrapped[0]
    else:
        # RESP2: [[stream, [(id, fields), ...]], ...]
        messages = []
        for name, items in response:
            if name == stream:
                messages = items
                break
    return [LogEntry(position=str(entry_id), fields=dict(fields or {})) for entry_id, fields in messages]


class RedisStreamTicketLog(TicketLog):
    def __init__(self, client: Redis, stream: str = "tickets-stream"):
        self._client = client
        self.stream = stream

    @classmethod
    def from_url(cls, url: str, stream: str = "tickets-stream") -> "RedisStreamTicketLog":
        client = Redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=10,
            retry_on_timeout=True,
        )
        logger.info(f"Ticket log configured: redis stream '{stream}'")
        return cls(client, stream)

    async def append(self, fields: Dict[str, str]) -> str:
        entry_id = await self._client.xadd(self.stream, fields)
        return str(entry_id)

    async def read(self, after: str, *, block_ms: int, count: int = 100) -> List[LogEntry]:
        response = await self._client.xread({self.stream: after}, count=count, block=block_ms)
        return _parse_xread(response, self.stream)

    async def latest_position(self) -> str:
        newest: Optional[list] = await self._client.xrevrange(self.stream, count=1)
        if not newest:
            return EARLIEST_POSITION
        entry_id, _ = newest[0]
        return str(entry_id)

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except Exception as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
