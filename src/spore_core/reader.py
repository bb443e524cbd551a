"""SporeReader — forward-only typed cursor over a spore's children.

Children must be read in the order and number they were appended by the
:class:`~spore_core.builder.SporeBuilder`. A reader is a single-owner
mutable cursor and is not internally synchronised.
"""

from __future__ import annotations

import uuid
from datetime import date
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, TypeVar

from .errors import (
    AmbiguousMapEncoding,
    CursorExhausted,
    InstantiationFailed,
    InvalidEnumOrdinal,
)
from .freeze import populate
from .model import EMPTY_COLLECTION_PAYLOAD, Spore
from .registry import SporeRegistry, instantiate

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")
R = TypeVar("R")
E = TypeVar("E", bound=Enum)


def from_payload(fn: Callable[[str], T]) -> Callable[[Spore], T]:
    """Adapt a string parser into an element thawer: ``from_payload(int)``."""
    return lambda spore: fn(str(spore))


# ---------------------------------------------------------------------------
# Payload parsers
# ---------------------------------------------------------------------------

def parse_bool(text: str) -> bool:
    """``true`` in any case is True; everything else is False."""
    return text.lower() == "true"


def parse_locale(text: str) -> str:
    """Normalise a locale tag to BCP 47 casing: ``en_us`` → ``en-US``."""
    parts = [p for p in text.replace("_", "-").split("-") if p]
    if not parts:
        return ""
    result = [parts[0].lower()]
    for part in parts[1:]:
        if len(part) == 4 and part.isalpha():
            result.append(part.title())
        elif (len(part) == 2 and part.isalpha()) or (len(part) == 3 and part.isdigit()):
            result.append(part.upper())
        else:
            result.append(part)
    return "-".join(result)


# ---------------------------------------------------------------------------
# SporeReader
# ---------------------------------------------------------------------------

class SporeReader:
    """Cursor over the children of *spore*; metadata is not part of the sequence."""

    def __init__(self, spore: Spore) -> None:
        self._spore = spore
        self._children = spore.children
        self._position = 0

    # -- Cursor state ---------------------------------------------------

    @property
    def spore(self) -> Spore:
        return self._spore

    @property
    def position(self) -> int:
        """Number of children consumed so far."""
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._children) - self._position

    @property
    def is_exhausted(self) -> bool:
        return self._position >= len(self._children)

    def has_next(self) -> bool:
        return not self.is_exhausted

    def __repr__(self) -> str:
        return f"SporeReader(position={self._position}, remaining={self.remaining})"

    # -- Raw access -----------------------------------------------------

    def next_as_spore(self) -> Spore:
        if self.is_exhausted:
            raise CursorExhausted(
                f"All {len(self._children)} children of the spore were already read"
            )
        child = self._children[self._position]
        self._position += 1
        return child

    def next_as_from_spore(self, thaw: Callable[[Spore], T]) -> T | None:
        child = self.next_as_spore()
        return None if child.is_payload_null() else thaw(child)

    def next_as(self, parse: Callable[[str], T]) -> T | None:
        """Read the next child's payload through *parse*; None for a null payload."""
        return self.next_as_from_spore(from_payload(parse))

    def next_reader_if_present(self) -> SporeReader | None:
        return SporeReader(self.next_as_spore()) if self.has_next() else None

    # -- Primitives -----------------------------------------------------

    def next_as_string(self) -> str | None:
        return self.next_as(str)

    def next_as_int(self) -> int | None:
        return self.next_as(int)

    def next_as_long(self) -> int | None:
        return self.next_as(int)

    def next_as_float(self) -> float | None:
        return self.next_as(float)

    def next_as_bool(self) -> bool | None:
        return self.next_as(parse_bool)

    def next_as_locale(self) -> str | None:
        return self.next_as(parse_locale)

    def next_as_uuid(self) -> uuid.UUID | None:
        return self.next_as(uuid.UUID)

    def next_as_date(self) -> date | None:
        return self.next_as(date.fromisoformat)

    def next_as_enum(self, enum_cls: type[E]) -> E | None:
        """Read an enum member stored by its ordinal.

        Raises :class:`~spore_core.errors.InvalidEnumOrdinal` when the ordinal
        is outside the enum.
        """
        index = self.next_as_int()
        if index is None:
            return None
        members = list(enum_cls)
        if not 0 <= index < len(members):
            raise InvalidEnumOrdinal(f"{enum_cls.__name__} has no member at ordinal {index}")
        return members[index]

    # -- Collections ----------------------------------------------------

    def _next_elements(self) -> tuple[Spore, ...] | None:
        """Elements of the next collection: None if null, () if empty."""
        child = self.next_as_spore()
        if child.is_payload_null():
            return None
        if str(child) == EMPTY_COLLECTION_PAYLOAD:
            return ()
        return child.children

    def next_as_stream(self, thaw: Callable[[Spore], T] = str) -> Iterator[T | None]:
        """Lazily thaw the next collection; a null collection yields nothing."""
        elements = self._next_elements()
        return iter(()) if elements is None else (_thaw(e, thaw) for e in elements)

    def next_as_collection(
        self,
        thaw: Callable[[Spore], T],
        collector: Callable[[Iterable[T | None]], R],
    ) -> R | None:
        """Thaw the next collection into ``collector(elements)``; None if it was null.

        Null elements thaw to None without calling *thaw*.
        """
        elements = self._next_elements()
        if elements is None:
            return None
        return collector(_thaw(e, thaw) for e in elements)

    def next_as_collection_excluding_none(
        self,
        thaw: Callable[[Spore], T | None],
        collector: Callable[[Iterable[T]], R],
    ) -> R | None:
        """Like :meth:`next_as_collection`, dropping elements that thaw to None."""
        elements = self._next_elements()
        if elements is None:
            return None
        thawed = (_thaw(e, thaw) for e in elements)
        return collector(item for item in thawed if item is not None)

    def next_as_list(self, thaw: Callable[[Spore], T] = str) -> list[T | None] | None:
        return self.next_as_collection(thaw, list)

    def next_as_set(self, thaw: Callable[[Spore], T] = str) -> set[T | None] | None:
        return self.next_as_collection(thaw, set)

    def next_as_map(
        self,
        key_thaw: Callable[[Spore], K] = str,
        val_thaw: Callable[[Spore], V] = str,
    ) -> dict[K | None, V | None] | None:
        """Thaw the next collection as interleaved key/value pairs.

        None if the map was null, ``{}`` if it was empty. Later keys win.
        """
        elements = self._next_elements()
        if elements is None:
            return None
        if len(elements) % 2:
            raise AmbiguousMapEncoding(
                f"A map needs an even number of members, found {len(elements)}"
            )

        result: dict[K | None, V | None] = {}
        for i in range(0, len(elements), 2):
            result[_thaw(elements[i], key_thaw)] = _thaw(elements[i + 1], val_thaw)
        return result

    # -- Nested sporables -----------------------------------------------

    def parse_next_into(self, target: Any) -> SporeReader:
        """Populate *target* from the next child, whatever it holds."""
        populate(target, self.next_as_spore())
        return self

    def next_as_sporable(self, factory: Callable[[], T]) -> T | None:
        """Create an instance with *factory* and populate it from the next child."""
        child = self.next_as_spore()
        return None if child.is_payload_null() else _create(factory(), child)

    def next_as_sporable_by_version(self, factory: Callable[[str | None], T]) -> T | None:
        """Like :meth:`next_as_sporable`; *factory* receives the child's version."""
        child = self.next_as_spore()
        if child.is_payload_null():
            return None
        return _create(factory(child.version()), child)

    def next_as_automatic(
        self,
        registry: SporeRegistry | None = None,
        type_hint: type | None = None,
        name_hint: str | None = None,
    ) -> Any:
        """Instantiate the next child from the type its own metadata names."""
        return self.next_as_from_spore(
            lambda child: instantiate(child, registry, type_hint=type_hint, name_hint=name_hint)
        )


def _create(instance: T | None, child: Spore) -> T:
    if instance is None:
        raise InstantiationFailed("Must supply a sporable instance!")
    return populate(instance, child)


def _thaw(element: Spore, thaw: Callable[[Spore], T]) -> T | None:
    return None if element.is_payload_null() else thaw(element)
