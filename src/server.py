"""Protean Engine runner for the dine-in domain.

Only needed when event processing is asynchronous (``PROTEAN_ENV=production``):
the engine then delivers order events to the ticket synchronizer and the
table occupancy coordinator.

Usage:
    PROTEAN_ENV=production python src/server.py
"""

import asyncio

from protean.server.engine import Engine


def main():
    from dinein.domain import dinein
    from dinein.utils.logging import configure_logging

    configure_logging(json_output=True)
    dinein.init()
    asyncio.run(Engine(dinein).run())


if __name__ == "__main__":
    main()
