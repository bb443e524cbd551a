"""Spore Core — schema-less textual freezing of tree-shaped values."""

from .builder import SporeBuilder
from .codec import dumps, loads
from .errors import (
    AmbiguousMapEncoding,
    CursorExhausted,
    InstantiationFailed,
    InvalidEnumOrdinal,
    MalformedFrozenString,
    MissingMetadata,
    SporeError,
    TypeResolutionAmbiguous,
    TypeResolutionFailed,
)
from .freeze import Sporable, freeze, is_sporable
from .model import (
    EMPTY_COLLECTION_PAYLOAD,
    NULL_PAYLOAD,
    AtomicSpore,
    CompositeSpore,
    Metadata,
    MetadataEntry,
    MetadataKind,
    Spore,
    has_null_or_empty_payload,
    is_frozen_composite,
)
from .reader import SporeReader, from_payload
from .registry import (
    Resolution,
    ResolutionOutcome,
    SporeRegistry,
    default_registry,
    instantiate,
    sporable,
)
from .repl import SporeRepl

__all__ = [
    "dumps",
    "loads",
    "freeze",
    "is_sporable",
    "Sporable",
    "sporable",
    "Spore",
    "AtomicSpore",
    "CompositeSpore",
    "Metadata",
    "MetadataEntry",
    "MetadataKind",
    "NULL_PAYLOAD",
    "EMPTY_COLLECTION_PAYLOAD",
    "has_null_or_empty_payload",
    "is_frozen_composite",
    "SporeBuilder",
    "SporeReader",
    "from_payload",
    "SporeRegistry",
    "Resolution",
    "ResolutionOutcome",
    "default_registry",
    "instantiate",
    "SporeRepl",
    "SporeError",
    "MalformedFrozenString",
    "AmbiguousMapEncoding",
    "MissingMetadata",
    "TypeResolutionFailed",
    "TypeResolutionAmbiguous",
    "InstantiationFailed",
    "InvalidEnumOrdinal",
    "CursorExhausted",
]
