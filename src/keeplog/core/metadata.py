"""Metadata merging and conversion into persistable values.

Three sources contribute metadata to every log call. From lowest to
highest precedence they are:

* the snapshot returned by the metadata provider,
* the metadata set on the handler,
* the metadata passed with the individual call.

The merged map is then narrowed to values the store can persist: text and
describable values are kept, arrays and dictionaries are dropped.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import assert_never

from keeplog.core.models import (
    Metadata,
    MetadataArray,
    MetadataDictionary,
    MetadataString,
    MetadataStringConvertible,
    MetadataValue,
    StoreMetadata,
    StoreMetadataValue,
    StoreString,
    StoreStringConvertible,
    lift_metadata,
    metadata_value,
)


class MetadataProvider:
    """Supplies metadata dynamically at the time of each log call.

    Example:
        ```python
        provider = MetadataProvider(lambda: {"request_id": current_request_id()})
        handler = PersistentLogHandler("app", metadata_provider=provider)
        ```
    """

    def __init__(self, get: Callable[[], Mapping[str, object]]) -> None:
        if not callable(get):
            raise TypeError("metadata provider must be callable")
        self._get = get

    def get(self) -> Metadata:
        """Invoke the provider and return a fresh metadata snapshot."""
        return lift_metadata(self._get())

    @classmethod
    def multiplex(
        cls, providers: Iterable["MetadataProvider"]
    ) -> "MetadataProvider | None":
        """Combine providers into one; later providers win on key collisions.

        Returns None when there are no providers to combine.
        """
        providers = list(providers)
        if not providers:
            return None
        if len(providers) == 1:
            return providers[0]

        def get_all() -> Metadata:
            merged: Metadata = {}
            for provider in providers:
                merged.update(provider.get())
            return merged

        return cls(get_all)


def as_metadata_provider(
    provider: MetadataProvider | Callable[[], Mapping[str, object]] | None,
) -> MetadataProvider | None:
    """Wrap a bare callable in a MetadataProvider; None stays None."""
    if provider is None or isinstance(provider, MetadataProvider):
        return provider
    return MetadataProvider(provider)


def merge_metadata(
    static: Mapping[str, MetadataValue],
    provider: MetadataProvider | None = None,
    call: Mapping[str, MetadataValue] | None = None,
) -> Metadata:
    """Merge provider, handler and call metadata into a single map.

    Args:
        static: Metadata set on the handler.
        provider: Optional provider, invoked exactly once.
        call: Optional metadata passed with the individual log call.

    Returns:
        A new map. For each key the call value wins over the handler value,
        which wins over the provider value. None of the inputs is mutated.
    """
    merged: Metadata = provider.get() if provider is not None else {}
    merged.update(static)
    if call:
        merged.update(call)
    return merged


def to_persistable(value: MetadataValue | object) -> StoreMetadataValue | None:
    """Convert one metadata value to a persistable value.

    Plain Python values are lifted with metadata_value() first. Returns
    None for arrays and dictionaries, which the store cannot record. A
    describable value is reduced to its text here; if its ``__str__``
    raises, the exception propagates.
    """
    lifted = metadata_value(value)
    if isinstance(lifted, MetadataString):
        return StoreString(lifted.value)
    if isinstance(lifted, MetadataStringConvertible):
        return StoreStringConvertible(str(lifted.value))
    if isinstance(lifted, MetadataArray):
        return None
    if isinstance(lifted, MetadataDictionary):
        return None
    assert_never(lifted)


def persistable_metadata(
    metadata: Mapping[str, MetadataValue | object],
) -> StoreMetadata:
    """Convert every entry of a metadata map, omitting unsupported values."""
    converted: StoreMetadata = {}
    for key, value in metadata.items():
        persistable = to_persistable(value)
        if persistable is not None:
            converted[key] = persistable
    return converted
