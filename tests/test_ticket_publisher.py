from unittest.mock import AsyncMock, MagicMock

import pytest

from civic_tickets.core.errors import PublishFailure
from civic_tickets.models.ticket import Ticket
from civic_tickets.services.ticket_publisher import PAYLOAD_FIELD, TicketPublisher
from civic_tickets.services.validator import validate_submission

SUBMISSION = validate_submission(
    {"concern": "Streetlight", "userName": "Ravi", "lat": 12.9716, "lng": 77.5946}
)


@pytest.mark.asyncio
async def test_publish_appends_one_entry_with_ticket_json(ticket_log):
    publisher = TicketPublisher(ticket_log, clock=lambda: 1_700_000_000_123)

    ticket = await publisher.publish(SUBMISSION, "Shivajinagar")

    entries = ticket_log.entries
    assert len(entries) == 1
    assert list(entries[0].fields) == [PAYLOAD_FIELD]
    decoded = Ticket.from_json(entries[0].fields[PAYLOAD_FIELD])
    assert decoded == ticket
    assert decoded.area == "Shivajinagar"
    assert decoded.timestamp == 1_700_000_000_123
    assert decoded.notes is None


@pytest.mark.asyncio
async def test_payload_uses_camel_case_field_names(ticket_log):
    await TicketPublisher(ticket_log).publish(SUBMISSION, "Shivajinagar")
    payload = ticket_log.entries[0].fields[PAYLOAD_FIELD]
    assert '"userName":"Ravi"' in payload
    assert "user_name" not in payload


@pytest.mark.asyncio
async def test_each_ticket_gets_a_fresh_id(ticket_log):
    publisher = TicketPublisher(ticket_log)
    first = await publisher.publish(SUBMISSION, "A")
    second = await publisher.publish(SUBMISSION, "A")
    assert first.id != second.id


@pytest.mark.asyncio
async def test_timestamps_never_go_backwards(ticket_log):
    readings = iter([1000, 900, 1100])
    publisher = TicketPublisher(ticket_log, clock=lambda: next(readings))

    stamps = [(await publisher.publish(SUBMISSION, "A")).timestamp for _ in range(3)]

    assert stamps == [1000, 1000, 1100]


@pytest.mark.asyncio
async def test_append_failure_raises_publish_failure():
    log = MagicMock()
    log.append = AsyncMock(side_effect=ConnectionError("redis down"))
    publisher = TicketPublisher(log, id_factory=lambda: "fixed-id")

    with pytest.raises(PublishFailure) as exc_info:
        await publisher.publish(SUBMISSION, "A")

    assert exc_info.value.ticket_id == "fixed-id"
    assert exc_info.value.code == "PUBLISH_FAILED"
    assert isinstance(exc_info.value.cause, ConnectionError)
    log.append.assert_awaited_once()
