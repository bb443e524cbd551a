"""Exceptions raised by spore_core."""

from __future__ import annotations


class SporeError(Exception):
    """Base class for every spore encode/decode failure."""


class MalformedFrozenString(SporeError):
    """A frozen string has a composite shape the tokenizer cannot split."""


class AmbiguousMapEncoding(SporeError):
    """A flattened map holds an odd number of members."""


class MissingMetadata(SporeError):
    """A spore lacks the metadata (or metadata entry) an operation needs."""


class TypeResolutionFailed(SporeError):
    """No registered type matches a unique identifier."""


class TypeResolutionAmbiguous(SporeError):
    """More than one registered type matches a unique identifier."""


class InstantiationFailed(SporeError):
    """A resolved type could not be constructed or cannot repopulate itself."""


class CursorExhausted(SporeError):
    """A reader was asked for a child after the last one was consumed."""


class InvalidEnumOrdinal(SporeError, IndexError):
    """A stored enum ordinal has no member at that position."""
