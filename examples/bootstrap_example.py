"""Example: bootstrap the logging system with a persistent store.

Every Logger created after bootstrap writes to logs.db and echoes to
stdout. Run with:

    python examples/bootstrap_example.py
"""

import itertools

from keeplog import (
    Logger,
    LoggingSystem,
    MetadataProvider,
    MultiplexLogHandler,
    PersistentLogHandler,
    SQLiteLoggerStore,
    StreamLogHandler,
)

store = SQLiteLoggerStore("logs.db")
request_ids = itertools.count(1)
provider = MetadataProvider(lambda: {"request_id": f"req-{next(request_ids)}"})

LoggingSystem.bootstrap(
    lambda label, metadata_provider: MultiplexLogHandler(
        [
            PersistentLogHandler(label, metadata_provider, store=store),
            StreamLogHandler.standard_output(label, metadata_provider),
        ]
    ),
    metadata_provider=provider,
)


def main() -> None:
    logger = Logger("com.example.checkout")
    logger["env"] = "staging"

    logger.info("Checkout started", {"cart_items": "3"})
    logger.warning("Payment retry", {"attempt": 2, "gateways": ["a", "b"]})
    logger.debug("Not stored: below the default info level")

    for message in store.messages(label="com.example.checkout"):
        print(message.level.name, message.text, message.metadata)


if __name__ == "__main__":
    main()
