"""Example: route standard library logging into a log store.

Run with:

    python examples/stdlib_logging_example.py
"""

import asyncio
import logging

from keeplog import KeeplogHandler, SQLiteLoggerStore

store = SQLiteLoggerStore("logs.db")

root = logging.getLogger()
root.setLevel(logging.DEBUG)
root.addHandler(KeeplogHandler(store, metadata_provider=lambda: {"service": "billing"}))

logger = logging.getLogger("billing.invoices")


async def show_recent() -> None:
    async for message in store.read(label="billing.invoices"):
        print(message.created_at, message.level.name, message.text, message.metadata)
    print("total stored:", await store.count())


def main() -> None:
    logger.info("Invoice created", extra={"invoice_id": "INV-1001"})
    try:
        1 / 0
    except ZeroDivisionError:
        logger.exception("Tax computation failed", extra={"invoice_id": "INV-1001"})

    asyncio.run(show_recent())


if __name__ == "__main__":
    main()
