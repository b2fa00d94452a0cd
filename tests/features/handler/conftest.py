"""BDD step definitions for persistent handler features."""

import json
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from keeplog.adapters.handler import PersistentLogHandler
from keeplog.adapters.storage.in_memory import InMemoryLoggerStore
from keeplog.core.levels import Level
from keeplog.core.models import MetadataStringConvertible


class Describable:
    """Object whose text form is given at construction."""

    def __init__(self, text: str) -> None:
        self._text = text

    def __str__(self) -> str:
        return self._text


@dataclass
class HandlerScenarioContext:
    """State shared between the steps of one scenario."""

    store: InMemoryLoggerStore = field(default_factory=InMemoryLoggerStore)
    handler: PersistentLogHandler | None = None
    handlers: dict[str, PersistentLogHandler] = field(default_factory=dict)

    def current_handler(self) -> PersistentLogHandler:
        assert self.handler is not None, "no handler configured in this scenario"
        return self.handler


@pytest.fixture
def ctx() -> HandlerScenarioContext:
    """Fresh scenario context for each test."""
    return HandlerScenarioContext()


# === Background Steps ===
@given("an in-memory log store")
def step_store(ctx: HandlerScenarioContext) -> None:
    ctx.store = InMemoryLoggerStore()


# === Handler Setup ===
@given(parsers.parse('a handler labelled "{label}"'))
def step_handler(ctx: HandlerScenarioContext, label: str) -> None:
    ctx.handler = PersistentLogHandler(label, store=ctx.store)


@given(
    parsers.parse(
        "a handler labelled \"{label}\" with a provider returning '{metadata}'"
    )
)
def step_handler_with_provider(
    ctx: HandlerScenarioContext, label: str, metadata: str
) -> None:
    snapshot = json.loads(metadata)
    ctx.handler = PersistentLogHandler(
        label, metadata_provider=lambda: dict(snapshot), store=ctx.store
    )


@given(parsers.parse("the handler has metadata '{metadata}'"))
@when(parsers.parse("the handler metadata is set to '{metadata}'"))
def step_set_metadata(ctx: HandlerScenarioContext, metadata: str) -> None:
    handler = ctx.current_handler()
    for key, value in json.loads(metadata).items():
        handler[key] = value


@given(parsers.parse('handlers labelled "{first}" and "{second}" sharing the store'))
def step_two_handlers(ctx: HandlerScenarioContext, first: str, second: str) -> None:
    ctx.handlers = {
        label: PersistentLogHandler(label, store=ctx.store) for label in (first, second)
    }


@when(parsers.parse("the \"{label}\" handler metadata is set to '{metadata}'"))
def step_set_named_metadata(
    ctx: HandlerScenarioContext, label: str, metadata: str
) -> None:
    for key, value in json.loads(metadata).items():
        ctx.handlers[label][key] = value


# === Logging ===
@when("the handler logs a message")
def step_log(ctx: HandlerScenarioContext) -> None:
    ctx.current_handler().log(Level.INFO, "request")


@when(parsers.parse("the handler logs a message with metadata '{metadata}'"))
def step_log_with_metadata(ctx: HandlerScenarioContext, metadata: str) -> None:
    ctx.current_handler().log(Level.INFO, "request", json.loads(metadata))


@when(
    parsers.parse(
        'the handler logs a message with a describable "{key}" reading "{text}"'
    )
)
def step_log_with_describable(ctx: HandlerScenarioContext, key: str, text: str) -> None:
    ctx.current_handler().log(
        Level.DEBUG,
        "request failed",
        {key: MetadataStringConvertible(Describable(text))},
    )


@when("each handler logs once concurrently")
def step_log_concurrently(ctx: HandlerScenarioContext) -> None:
    with ThreadPoolExecutor(max_workers=len(ctx.handlers)) as pool:
        futures = [
            pool.submit(handler.log, Level.INFO, f"from {label}")
            for label, handler in ctx.handlers.items()
        ]
        for future in futures:
            future.result()


# === Assertions ===
@then(parsers.parse("the last persisted metadata is '{metadata}'"))
def step_last_metadata(ctx: HandlerScenarioContext, metadata: str) -> None:
    messages = ctx.store.all_messages()
    assert messages, "no messages were persisted"
    assert messages[-1].metadata == json.loads(metadata)


@then(parsers.parse("the store contains {count:d} messages"))
def step_message_count(ctx: HandlerScenarioContext, count: int) -> None:
    assert len(ctx.store.all_messages()) == count


@then("each message is attributed to its own handler")
def step_attributed(ctx: HandlerScenarioContext) -> None:
    by_label = {m.label: m.text for m in ctx.store.all_messages()}
    assert by_label == {label: f"from {label}" for label in ctx.handlers}


@then(parsers.parse("the \"{label}\" message has metadata '{metadata}'"))
def step_named_metadata(ctx: HandlerScenarioContext, label: str, metadata: str) -> None:
    [message] = ctx.store.messages(label=label)
    assert message.metadata == json.loads(metadata)
