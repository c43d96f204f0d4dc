"""
Tests for the ticket log backends.

The Redis backend is exercised against an AsyncMock client; reply shapes
cover both RESP2 (list of [stream, entries]) and RESP3 (dict) parsing.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from civic_tickets.services.ticket_log import EARLIEST_POSITION, InMemoryTicketLog, LogEntry, RedisStreamTicketLog
from civic_tickets.services.ticket_log.redis_stream import _parse_xread

STREAM = "tickets-stream"


@pytest.fixture
def redis_client():
    client = MagicMock()
    client.xadd = AsyncMock(return_value="1700000000000-0")
    client.xread = AsyncMock(return_value=None)
    client.xrevrange = AsyncMock(return_value=[])
    client.ping = AsyncMock(return_value=True)
    client.aclose = AsyncMock()
    return client


class TestParseXread:
    def test_empty_reply(self):
        assert _parse_xread(None, STREAM) == []
        assert _parse_xread([], STREAM) == []

    def test_resp2_reply(self):
        reply = [[STREAM, [("1-0", {"data": "a"}), ("2-0", {"data": "b"})]]]
        assert _parse_xread(reply, STREAM) == [
            LogEntry("1-0", {"data": "a"}),
            LogEntry("2-0", {"data": "b"}),
        ]

    def test_resp2_reply_for_other_stream_is_ignored(self):
        assert _parse_xread([["other", [("1-0", {"data": "a"})]]], STREAM) == []

    def test_resp3_reply(self):
        reply = {STREAM: [[("5-0", {"data": "x"})]]}
        assert _parse_xread(reply, STREAM) == [LogEntry("5-0", {"data": "x"})]

    def test_resp3_reply_with_several_entries(self):
        reply = {STREAM: [[["5-0", {"data": "x"}], ["6-0", {"data": "y"}]]]}
        assert [e.position for e in _parse_xread(reply, STREAM)] == ["5-0", "6-0"]

    def test_resp3_reply_for_other_stream_is_ignored(self):
        assert _parse_xread({"other": [[("1-0", {"data": "a"})]]}, STREAM) == []


class TestRedisStreamTicketLog:
    @pytest.mark.asyncio
    async def test_append_uses_xadd(self, redis_client):
        log = RedisStreamTicketLog(redis_client, STREAM)

        position = await log.append({"data": "{}"})

        assert position == "1700000000000-0"
        redis_client.xadd.assert_awaited_once_with(STREAM, {"data": "{}"})

    @pytest.mark.asyncio
    async def test_read_blocks_after_cursor(self, redis_client):
        redis_client.xread.return_value = [[STREAM, [("9-0", {"data": "z"})]]]
        log = RedisStreamTicketLog(redis_client, STREAM)

        entries = await log.read("8-0", block_ms=5000, count=10)

        assert entries == [LogEntry("9-0", {"data": "z"})]
        redis_client.xread.assert_awaited_once_with({STREAM: "8-0"}, count=10, block=5000)

    @pytest.mark.asyncio
    async def test_latest_position(self, redis_client):
        log = RedisStreamTicketLog(redis_client, STREAM)
        assert await log.latest_position() == EARLIEST_POSITION

        redis_client.xrevrange.return_value = [("42-1", {"data": "{}"})]
        assert await log.latest_position() == "42-1"
        redis_client.xrevrange.assert_awaited_with(STREAM, count=1)

    @pytest.mark.asyncio
    async def test_ping_failure_is_reported_not_raised(self, redis_client):
        redis_client.ping.side_effect = ConnectionError("refused")
        log = RedisStreamTicketLog(redis_client, STREAM)
        assert await log.ping() is False

    @pytest.mark.asyncio
    async def test_close(self, redis_client):
        await RedisStreamTicketLog(redis_client, STREAM).close()
        redis_client.aclose.assert_awaited_once()

    def test_from_url_decodes_responses(self):
        with patch("civic_tickets.services.ticket_log.redis_stream.Redis") as redis_cls:
            log = RedisStreamTicketLog.from_url("redis://localhost:6379", "custom")

        assert log.stream == "custom"
        _, kwargs = redis_cls.from_url.call_args
        assert kwargs["decode_responses"] is True


class TestInMemoryTicketLog:
    @pytest.mark.asyncio
    async def test_positions_increase(self, ticket_log):
        first = await ticket_log.append({"data": "a"})
        second = await ticket_log.append({"data": "b"})
        assert (first, second) == ("1-0", "2-0")
        assert await ticket_log.latest_position() == "2-0"

    @pytest.mark.asyncio
    async def test_read_after_cursor(self, ticket_log):
        for value in "abc":
            await ticket_log.append({"data": value})

        entries = await ticket_log.read("1-0", block_ms=0)

        assert [e.fields["data"] for e in entries] == ["b", "c"]

    @pytest.mark.asyncio
    async def test_read_respects_count(self, ticket_log):
        for value in "abc":
            await ticket_log.append({"data": value})
        entries = await ticket_log.read(EARLIEST_POSITION, block_ms=0, count=2)
        assert [e.position for e in entries] == ["1-0", "2-0"]

    @pytest.mark.asyncio
    async def test_empty_read_returns_after_block(self, ticket_log):
        assert await ticket_log.read(EARLIEST_POSITION, block_ms=30) == []

    @pytest.mark.asyncio
    async def test_entries_are_copied(self):
        log = InMemoryTicketLog()
        fields = {"data": "a"}
        await log.append(fields)
        fields["data"] = "mutated"
        assert log.entries[0].fields == {"data": "a"}
