"""Tests for spore_core.model."""

import pytest

from spore_core.errors import MissingMetadata
from spore_core.model import (
    EMPTY_COLLECTION_PAYLOAD,
    NULL_PAYLOAD,
    NULL_SPORE,
    AtomicSpore,
    CompositeSpore,
    Metadata,
    MetadataEntry,
    MetadataKind,
    has_null_or_empty_payload,
    is_frozen_composite,
)


class TestAtomicSpore:
    def test_payload_is_its_frozen_form(self):
        assert str(AtomicSpore("hello")) == "hello"

    def test_null_sentinel(self):
        assert AtomicSpore(NULL_PAYLOAD).is_payload_null()
        assert not AtomicSpore("x").is_payload_null()

    def test_none_becomes_sentinel(self):
        assert AtomicSpore(None).payload == NULL_PAYLOAD

    def test_empty_string_is_not_null(self):
        assert not AtomicSpore("").is_payload_null()

    def test_no_children_no_metadata(self):
        spore = AtomicSpore("x")
        assert spore.children == ()
        assert len(spore) == 0
        assert list(spore) == []
        assert spore.metadata is None
        assert spore.version() is None
        assert spore.unique_identifier() is None

    def test_structural_equality(self):
        assert AtomicSpore("a") == AtomicSpore("a")
        assert AtomicSpore("a") != AtomicSpore("b")


class TestCompositeSpore:
    def test_empty(self):
        spore = CompositeSpore()
        assert str(spore) == "{||}"
        assert not spore.is_payload_null()

    def test_children_joined(self):
        spore = CompositeSpore(None, [AtomicSpore("a"), AtomicSpore("b")])
        assert str(spore) == "{|a_|_b|}"
        assert isinstance(spore.children, tuple)

    def test_nested(self):
        inner = CompositeSpore(None, (AtomicSpore("b"), AtomicSpore("c")))
        spore = CompositeSpore(None, (AtomicSpore("a"), inner))
        assert str(spore) == "{|a_|_{|b_|_c|}|}"

    def test_metadata_written_first(self):
        metadata = Metadata.of({MetadataKind.VERSION: "1", MetadataKind.UNIQUE_IDENTIFIER: "X"})
        spore = CompositeSpore(metadata, (AtomicSpore("a"),))
        assert str(spore) == "{|{|spr_|_v1_|_uX|}_|_a|}"

    def test_null_children_keep_composite_present(self):
        spore = CompositeSpore(None, (NULL_SPORE, NULL_SPORE))
        assert not spore.is_payload_null()
        assert len(spore) == 2

    def test_iteration(self):
        children = (AtomicSpore("a"), AtomicSpore("b"))
        assert list(CompositeSpore(None, children)) == list(children)

    def test_version_without_metadata(self):
        spore = CompositeSpore()
        assert spore.version() is None
        assert spore.unique_identifier() is None

    def test_missing_entry_raises(self):
        spore = CompositeSpore(Metadata.of({MetadataKind.VERSION: "1"}))
        assert spore.version() == "1"
        with pytest.raises(MissingMetadata):
            spore.unique_identifier()

    def test_immutable(self):
        spore = CompositeSpore()
        with pytest.raises(AttributeError):
            spore.children = ()


class TestMetadata:
    def test_of_orders_by_kind(self):
        metadata = Metadata.of({MetadataKind.UNIQUE_IDENTIFIER: "id", MetadataKind.VERSION: "2"})
        assert [e.kind for e in metadata.entries] == [
            MetadataKind.PREFIX,
            MetadataKind.VERSION,
            MetadataKind.UNIQUE_IDENTIFIER,
        ]
        assert str(metadata) == "{|spr_|_v2_|_uid|}"

    def test_unset_info_is_empty(self):
        metadata = Metadata.of({MetadataKind.VERSION: None, MetadataKind.UNIQUE_IDENTIFIER: None})
        assert str(metadata) == "{|spr_|_v_|_u|}"
        assert metadata.version() == ""

    def test_requires_prefix_first(self):
        with pytest.raises(ValueError):
            Metadata((MetadataEntry(MetadataKind.VERSION, "1"),))

    def test_rejects_duplicates(self):
        with pytest.raises(ValueError):
            Metadata((
                MetadataEntry(MetadataKind.PREFIX),
                MetadataEntry(MetadataKind.VERSION, "1"),
                MetadataEntry(MetadataKind.VERSION, "2"),
            ))

    def test_prefix_entry_has_no_info(self):
        with pytest.raises(ValueError):
            MetadataEntry(MetadataKind.PREFIX, "x")

    def test_legacy_layout(self):
        metadata = Metadata(
            (MetadataEntry(MetadataKind.VERSION, "001"), MetadataEntry(MetadataKind.UNIQUE_IDENTIFIER)),
            name_hint="FilterModelUniqueId",
        )
        assert metadata.is_legacy
        assert str(metadata) == "v001_|_u_|_FilterModelUniqueId"
        assert metadata.unique_identifier() == ""

    def test_has(self):
        metadata = Metadata.of({MetadataKind.VERSION: "1"})
        assert metadata.has(MetadataKind.VERSION)
        assert not metadata.has(MetadataKind.UNIQUE_IDENTIFIER)

    def test_kind_for_text(self):
        assert MetadataKind.for_text("spr") is MetadataKind.PREFIX
        assert MetadataKind.for_text("v001") is MetadataKind.VERSION
        assert MetadataKind.for_text("uX") is MetadataKind.UNIQUE_IDENTIFIER
        assert MetadataKind.for_text("name") is None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def test_is_frozen_composite():
    assert is_frozen_composite("{|a|}")
    assert is_frozen_composite("{||}")
    assert not is_frozen_composite("{|a")
    assert not is_frozen_composite("a|}")
    assert not is_frozen_composite(None)


def test_has_null_or_empty_payload_null_collection():
    assert has_null_or_empty_payload(CompositeSpore(None, (NULL_SPORE,)))


def test_has_null_or_empty_payload_empty_collection():
    spore = CompositeSpore(None, (AtomicSpore(EMPTY_COLLECTION_PAYLOAD),))
    assert has_null_or_empty_payload(spore)


def test_has_null_or_empty_payload_populated():
    nested = CompositeSpore(None, (AtomicSpore("a"),))
    assert not has_null_or_empty_payload(CompositeSpore(None, (nested,)))


def test_has_null_or_empty_payload_degenerate():
    assert has_null_or_empty_payload(NULL_SPORE)
    assert has_null_or_empty_payload(CompositeSpore())
