"""
Intake service - the submission pipeline.

Flow (strictly sequential per submission):
1. Validate the raw body (first error only)
2. Reverse geocode the coordinates (bounded retries)
3. Boundary check; derive the area name
4. Publish the ticket to the durable log

Any failure ends the pipeline with a TicketingError and leaves no record.
If step 4 fails, the geocoding cost has already been paid; the client
resubmits.
"""

import logging
from typing import Any

from civic_tickets.core.errors import OutsideBoundary
from civic_tickets.models.ticket import Ticket
from civic_tickets.services.boundary import BoundaryClassifier
from civic_tickets.services.geocoding import GeocodeResolver
from civic_tickets.services.ticket_publisher import TicketPublisher
from civic_tickets.services.validator import validate_submission

logger = logging.getLogger(__name__)


class IntakeService:
    def __init__(self, resolver: GeocodeResolver, classifier: BoundaryClassifier, publisher: TicketPublisher):
        self.resolver = resolver
        self.classifier = classifier
        self.publisher = publisher

    async def submit(self, payload: Any) -> Ticket:
        submission = validate_submission(payload)

        address = await self.resolver.resolve(submission.lat, submission.lng)

        try:
            area = self.classifier.classify(address)
        except OutsideBoundary:
            logger.info(
                f"Submission rejected: outside city lat={submission.lat} lng={submission.lng} "
                f"city={self.classifier.city_name}"
            )
            raise

        ticket = await self.publisher.publish(submission, area)
        logger.info(f"Ticket created: ticket_id={ticket.id} area={area}")
        return ticket
