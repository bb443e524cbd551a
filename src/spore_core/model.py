"""Data model for spores: the value tree, its metadata and the wire constants."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Mapping

from .errors import MissingMetadata

if TYPE_CHECKING:
    from .registry import SporeRegistry


# ---------------------------------------------------------------------------
# Wire constants
# ---------------------------------------------------------------------------

PREFIX = "{|"
SUFFIX = "|}"
SEPARATOR = "_|_"

NULL_PAYLOAD = "--"
EMPTY_COLLECTION_PAYLOAD = "-e-"


def is_frozen_composite(text: str | None) -> bool:
    """True if *text* has the ``{| ... |}`` shape of a frozen composite."""
    return text is not None and text.startswith(PREFIX) and text.endswith(SUFFIX)


def join_members(members: list[str]) -> str:
    return PREFIX + SEPARATOR.join(members) + SUFFIX


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

class MetadataKind(Enum):
    """Kinds of metadata entry; the value is the entry's wire prefix."""

    PREFIX = "spr"
    VERSION = "v"
    UNIQUE_IDENTIFIER = "u"

    @property
    def prefix(self) -> str:
        return self.value

    @classmethod
    def for_text(cls, text: str) -> MetadataKind | None:
        for kind in cls:
            if text.startswith(kind.prefix):
                return kind
        return None


_KIND_ORDER = {kind: i for i, kind in enumerate(MetadataKind)}


@dataclass(frozen=True, slots=True)
class MetadataEntry:
    kind: MetadataKind
    info: str = ""

    def __post_init__(self) -> None:
        if self.info is None:
            object.__setattr__(self, "info", "")
        if self.kind is MetadataKind.PREFIX and self.info:
            raise ValueError("the metadata prefix entry carries no info")

    def __str__(self) -> str:
        return self.kind.prefix + self.info


@dataclass(frozen=True, slots=True)
class Metadata:
    """Ordered metadata entries attached to a composite spore.

    A regular block starts with the ``spr`` prefix entry and is written as a
    nested composite: ``{|spr_|_v001_|_uSomeId|}``.

    *name_hint* is only set for the legacy flat header, where the version
    and unique identifier entries sit directly among the composite's members
    followed by a type name: ``v001_|_uSomeId_|_SomeType``.
    """

    entries: tuple[MetadataEntry, ...]
    name_hint: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))
        kinds = [entry.kind for entry in self.entries]
        if len(set(kinds)) != len(kinds):
            raise ValueError(f"duplicate metadata kinds: {kinds}")
        if self.is_legacy:
            if kinds != [MetadataKind.VERSION, MetadataKind.UNIQUE_IDENTIFIER]:
                raise ValueError("a flat header holds exactly a version and a unique identifier")
        elif kinds[:1] != [MetadataKind.PREFIX]:
            raise ValueError("metadata must start with the prefix entry")

    @classmethod
    def of(cls, values: Mapping[MetadataKind, str | None]) -> Metadata:
        """Build block metadata from a kind → info mapping, in kind order."""
        kinds = sorted(
            (kind for kind in values if kind is not MetadataKind.PREFIX),
            key=_KIND_ORDER.__getitem__,
        )
        entries = [MetadataEntry(MetadataKind.PREFIX)]
        entries.extend(MetadataEntry(kind, values[kind]) for kind in kinds)
        return cls(tuple(entries))

    @property
    def is_legacy(self) -> bool:
        return self.name_hint is not None

    def entry(self, kind: MetadataKind) -> MetadataEntry:
        for entry in self.entries:
            if entry.kind is kind:
                return entry
        raise MissingMetadata(f"No metadata of type {kind.name}")

    def has(self, kind: MetadataKind) -> bool:
        return any(entry.kind is kind for entry in self.entries)

    def version(self) -> str:
        return self.entry(MetadataKind.VERSION).info

    def unique_identifier(self) -> str:
        return self.entry(MetadataKind.UNIQUE_IDENTIFIER).info

    def __str__(self) -> str:
        members = [str(entry) for entry in self.entries]
        if self.is_legacy:
            return SEPARATOR.join(members + [self.name_hint])
        return join_members(members)


# ---------------------------------------------------------------------------
# Spore — Atomic | Composite
# ---------------------------------------------------------------------------

class Spore:
    """A node of the value tree.

    Built spores are immutable and safe to share between threads.
    ``str(spore)`` is the frozen (wire) form.
    """

    __slots__ = ()

    metadata: Metadata | None
    children: tuple[Spore, ...]

    def is_payload_null(self) -> bool:
        raise NotImplementedError

    def version(self) -> str | None:
        return None if self.metadata is None else self.metadata.version()

    def unique_identifier(self) -> str | None:
        return None if self.metadata is None else self.metadata.unique_identifier()

    def __iter__(self) -> Iterator[Spore]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)

    @staticmethod
    def from_frozen(frozen: str | None, *, legacy_header: bool = False) -> Spore:
        from .codec import loads
        return loads(frozen, legacy_header=legacy_header)

    def to_instance(
        self,
        registry: SporeRegistry | None = None,
        type_hint: type | None = None,
        name_hint: str | None = None,
    ):
        """Instantiate and populate the sporable type named by this spore's metadata."""
        from .registry import instantiate
        return instantiate(self, registry, type_hint=type_hint, name_hint=name_hint)


@dataclass(frozen=True, slots=True)
class AtomicSpore(Spore):
    """Leaf holding a single string payload; ``--`` stands for null."""

    payload: str

    def __post_init__(self) -> None:
        if self.payload is None:
            object.__setattr__(self, "payload", NULL_PAYLOAD)

    @property
    def metadata(self) -> None:
        return None

    @property
    def children(self) -> tuple[Spore, ...]:
        return ()

    def is_payload_null(self) -> bool:
        return self.payload == NULL_PAYLOAD

    def __str__(self) -> str:
        return self.payload


@dataclass(frozen=True, slots=True)
class CompositeSpore(Spore):
    """Node holding optional metadata and an ordered tuple of children.

    Never null: an empty collection is written as a single ``-e-`` child by
    the builder, and a composite with no children at all is still present.
    """

    metadata: Metadata | None = None
    children: tuple[Spore, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))

    def is_payload_null(self) -> bool:
        return False

    def __str__(self) -> str:
        members = [str(child) for child in self.children]
        if self.metadata is not None:
            members.insert(0, str(self.metadata))
        return join_members(members)


NULL_SPORE = AtomicSpore(NULL_PAYLOAD)
EMPTY_COLLECTION_SPORE = AtomicSpore(EMPTY_COLLECTION_PAYLOAD)


def has_null_or_empty_payload(spore: Spore) -> bool:
    """True if *spore* wraps a collection that was appended as null or empty.

    Looks at the first child only: a null spore, a childless spore, or a
    first child equal to either sentinel all count.
    """
    if spore.is_payload_null() or not spore.children:
        return True
    first = spore.children[0]
    return first.is_payload_null() or str(first) == EMPTY_COLLECTION_PAYLOAD
