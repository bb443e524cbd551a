"""SporeBuilder — accumulates frozen values into a composite spore.

A builder is a single-owner mutable object; it is not internally
synchronised. Whatever is appended must be read back by a
:class:`~spore_core.reader.SporeReader` in the same order.

Usage::

    spore = (
        SporeBuilder.on(Person)
        .append(person.name)
        .append(person.status)                     # enum → ordinal
        .append_as_collection(person.tags)
        .append_as_map(person.scores)
        .build()
    )
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, TypeVar

from .freeze import freeze
from .model import (
    EMPTY_COLLECTION_SPORE,
    NULL_SPORE,
    CompositeSpore,
    Metadata,
    MetadataKind,
    Spore,
)

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")

Freezer = Callable[[Any], Any]


class SporeBuilder:
    """Mutable accumulator of child spores. Every ``append*`` returns the builder."""

    def __init__(self, version: str | None = None) -> None:
        self._metadata: dict[MetadataKind, str | None] = {}
        self._children: list[Spore] = []
        if version is not None:
            self.version(version)

    @classmethod
    def on(cls, sporable_cls: type) -> SporeBuilder:
        """Builder seeded with the version and unique identifier *sporable_cls* declares.

        Both entries are always written; an undeclared default is written empty.
        """
        builder = cls()
        builder.version(getattr(sporable_cls, "__spore_version__", None))
        builder.unique_identifier(getattr(sporable_cls, "__spore_unique_identifier__", None))
        return builder

    # -- Metadata -------------------------------------------------------

    def version(self, version: str | None) -> SporeBuilder:
        self._metadata[MetadataKind.VERSION] = version
        return self

    def unique_identifier(self, unique_identifier: str | None) -> SporeBuilder:
        self._metadata[MetadataKind.UNIQUE_IDENTIFIER] = unique_identifier
        return self

    # -- Sentinels ------------------------------------------------------

    def append_null_payload(self) -> SporeBuilder:
        self._children.append(NULL_SPORE)
        return self

    def append_as_empty_collection(self) -> SporeBuilder:
        self._children.append(EMPTY_COLLECTION_SPORE)
        return self

    # -- Values ---------------------------------------------------------

    def append(self, value: Any, freezer: Freezer | None = None) -> SporeBuilder:
        """Append one child.

        Without *freezer* the value is frozen by :func:`~spore_core.freeze.freeze`;
        a nested builder is built first. With *freezer*, ``freezer(value)`` is
        appended, and *freezer* is never called for ``None``.
        """
        self._children.append(_freeze_with(value, freezer))
        return self

    def append_as_collection(
        self, items: Iterable[T] | None, freezer: Callable[[T], Any] | None = None
    ) -> SporeBuilder:
        """Append *items* as one nested child.

        ``None`` appends the null payload, an empty iterable the empty
        collection payload. ``None`` elements become null children.
        """
        if items is None:
            return self.append_null_payload()
        return self.append_as_stream(iter(items), freezer)

    def append_as_stream(
        self, stream: Iterable[T] | None, freezer: Callable[[T], Any] | None = None
    ) -> SporeBuilder:
        """Like :meth:`append_as_collection`, consuming a one-shot iterable."""
        if stream is None:
            return self.append_null_payload()

        nested = SporeBuilder()
        for item in stream:
            nested.append(item, freezer)

        if not nested._children:
            return self.append_as_empty_collection()
        return self.append(nested)

    def append_as_map(
        self,
        mapping: Mapping[K, V] | None,
        key_freezer: Callable[[K], Any] | None = None,
        val_freezer: Callable[[V], Any] | None = None,
    ) -> SporeBuilder:
        """Append *mapping* as one nested child of interleaved keys and values.

        ``{k1: v1, k2: v2}`` is written exactly like the list
        ``[k1, v1, k2, v2]``, in the mapping's iteration order.
        """
        if mapping is None:
            return self.append_null_payload()
        if not mapping:
            return self.append_as_empty_collection()

        flattened: list[Spore] = []
        for key, val in mapping.items():
            flattened.append(_freeze_with(key, key_freezer))
            flattened.append(_freeze_with(val, val_freezer))
        return self.append_as_collection(flattened)

    # -- Result ---------------------------------------------------------

    def build(self) -> CompositeSpore:
        metadata = Metadata.of(self._metadata) if self._metadata else None
        return CompositeSpore(metadata, tuple(self._children))

    def __len__(self) -> int:
        return len(self._children)

    def __repr__(self) -> str:
        return f"SporeBuilder(spore_count={len(self._children)})"


def _freeze_with(value: Any, freezer: Freezer | None) -> Spore:
    if value is None:
        return NULL_SPORE
    if freezer is not None:
        value = freezer(value)
    if isinstance(value, SporeBuilder):
        return value.build()
    return freeze(value)
