"""
Standalone stream consumer for the ticket log.

Usage:
  - python scripts/run_consumer.py
  - python scripts/run_consumer.py --from-latest      # ignore backlog when no cursor is saved
  - python scripts/run_consumer.py --once             # one read, then exit (smoke test)

Behavior:
  - Reads REDIS_URL / TICKET_STREAM / STORE_BACKEND / DB_PATH from the environment (.env)
  - Resumes from the cursor saved in the store
  - Stops cleanly on SIGINT/SIGTERM

Run the API with RUN_CONSUMER=false when this script does the consuming;
only one consumer per stream is supported.
"""

import argparse
import asyncio
import logging
import signal

from civic_tickets.core.logging_config import configure_logging
from civic_tickets.core.settings import settings
from civic_tickets.dependencies import build_consumer, shutdown_services

logger = logging.getLogger("run_consumer")


async def main(from_latest: bool = False, once: bool = False) -> None:
    if from_latest:
        settings.CONSUMER_START_POSITION = "latest"
    consumer = build_consumer()

    if once:
        stats = await consumer.poll_once()
        logger.info(f"Single poll finished: {stats}")
        await shutdown_services()
        return

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, consumer.stop)
        except NotImplementedError:
            # Windows event loops
            pass

    try:
        await consumer.run()
    finally:
        await shutdown_services()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Consume the ticket log into the ticket store")
    parser.add_argument("--from-latest", action="store_true", help="Start at the newest entry when no cursor is saved")
    parser.add_argument("--once", action="store_true", help="Perform a single read and exit")
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)
    asyncio.run(main(from_latest=args.from_latest, once=args.once))
