"""Frozen string ↔ spore conversion."""

from __future__ import annotations

import logging

from .errors import MalformedFrozenString
from .model import (
    AtomicSpore,
    CompositeSpore,
    Metadata,
    MetadataEntry,
    MetadataKind,
    Spore,
    is_frozen_composite,
)
from .tokenizer import split_top_level, strip_limits

logger = logging.getLogger(__name__)


def dumps(spore: Spore) -> str:
    """Return the frozen form of *spore*."""
    return str(spore)


def loads(frozen: str | None, *, legacy_header: bool = False) -> Spore:
    """Decode a frozen string into a spore.

    Anything without the ``{| ... |}`` shape (``None`` included) becomes an
    atomic spore holding the raw text. A composite's first member is taken
    as metadata when it decodes to a block starting with ``spr``; with
    *legacy_header* the older flat ``v…_|_u…_|_TypeName`` header is also
    recognised, on the outermost composite only.
    """
    if not is_frozen_composite(frozen):
        return AtomicSpore(frozen)

    members = split_top_level(strip_limits(frozen))

    # every member is decoded once; the first doubles as the metadata candidate
    first = loads(members[0])
    metadata = _metadata_block(first, members[0])
    header_size = 1
    if metadata is None and legacy_header:
        metadata = _legacy_header(members)
        if metadata is not None:
            logger.debug("legacy metadata header found: %s", metadata)
            header_size = 3

    children: list[Spore] = [] if metadata is not None else [first]
    children.extend(loads(member) for member in members[header_size:])
    return CompositeSpore(metadata, tuple(children))


# ---------------------------------------------------------------------------
# Metadata detection
# ---------------------------------------------------------------------------

def _metadata_block(candidate: Spore, member: str) -> Metadata | None:
    """Metadata held by *candidate* (the decoded *member*), or None for an ordinary member."""
    if candidate.metadata is not None or not candidate.children:
        return None
    first = candidate.children[0]
    if not isinstance(first, AtomicSpore) or first.payload != MetadataKind.PREFIX.prefix:
        return None

    entries = [_entry(str(child), member) for child in candidate.children]
    kinds = [entry.kind for entry in entries]
    if MetadataKind.PREFIX in kinds[1:] or len(set(kinds)) != len(kinds):
        raise MalformedFrozenString(f"Repeated metadata entries in {member}")
    return Metadata(tuple(entries))


def _entry(text: str, block: str) -> MetadataEntry:
    kind = MetadataKind.for_text(text)
    if kind is None or (kind is MetadataKind.PREFIX and text != kind.prefix):
        raise MalformedFrozenString(f"Cannot determine metadata type of {text} in {block}")
    return MetadataEntry(kind, text[len(kind.prefix):])


def _legacy_header(members: list[str]) -> Metadata | None:
    if len(members) < 3:
        return None
    version, unique_id, name = members[:3]
    if any(is_frozen_composite(m) for m in (version, unique_id, name)):
        return None
    if not (version.startswith(MetadataKind.VERSION.prefix)
            and unique_id.startswith(MetadataKind.UNIQUE_IDENTIFIER.prefix)):
        return None
    entries = (
        MetadataEntry(MetadataKind.VERSION, version[len(MetadataKind.VERSION.prefix):]),
        MetadataEntry(MetadataKind.UNIQUE_IDENTIFIER, unique_id[len(MetadataKind.UNIQUE_IDENTIFIER.prefix):]),
    )
    return Metadata(entries, name_hint=name)
