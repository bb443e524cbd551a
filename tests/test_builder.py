"""Tests for spore_core.builder."""

from enum import Enum

import pytest

from spore_core.builder import SporeBuilder
from spore_core.freeze import Sporable
from spore_core.model import (
    EMPTY_COLLECTION_SPORE,
    NULL_SPORE,
    AtomicSpore,
    CompositeSpore,
    MetadataKind,
)
from spore_core.registry import SporeRegistry, sporable


class Status(Enum):
    ACTIVE = 1
    INACTIVE = 2


@sporable(version="3", unique_identifier="tag", registry=SporeRegistry())
class Tag(Sporable):
    def __init__(self, label=""):
        self.label = label

    def assemble_spore(self):
        return SporeBuilder.on(type(self)).append(self.label)


class Undeclared(Sporable):
    pass


def must_not_be_called(value):
    raise AssertionError(f"freezer called with {value!r}")


def frozen(builder):
    return str(builder.build())


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

class TestMetadata:
    def test_no_metadata_unless_set(self):
        assert SporeBuilder().append("x").build().metadata is None

    def test_version_argument(self):
        assert frozen(SporeBuilder("001")) == "{|{|spr_|_v001|}|}"

    def test_last_write_wins(self):
        spore = SporeBuilder("1").version("2").unique_identifier("a").unique_identifier("b").build()
        assert spore.version() == "2"
        assert spore.unique_identifier() == "b"

    def test_written_in_kind_order(self):
        spore = SporeBuilder().unique_identifier("id").version("9").build()
        kinds = [entry.kind for entry in spore.metadata.entries]
        assert kinds == [MetadataKind.PREFIX, MetadataKind.VERSION, MetadataKind.UNIQUE_IDENTIFIER]

    def test_on_declared_class(self):
        assert frozen(SporeBuilder.on(Tag)) == "{|{|spr_|_v3_|_utag|}|}"

    def test_on_undeclared_class_writes_empty_entries(self):
        assert frozen(SporeBuilder.on(Undeclared)) == "{|{|spr_|_v_|_u|}|}"


# ---------------------------------------------------------------------------
# append
# ---------------------------------------------------------------------------

class TestAppend:
    def test_scalars(self):
        assert frozen(SporeBuilder().append("a").append(1).append(2.5)) == "{|a_|_1_|_2.5|}"

    def test_none_is_null(self):
        assert SporeBuilder().append(None).build().children == (NULL_SPORE,)

    def test_freezer_skipped_for_none(self):
        spore = SporeBuilder().append(None, must_not_be_called).build()
        assert spore.children == (NULL_SPORE,)

    def test_freezer_applied(self):
        assert frozen(SporeBuilder().append(5, lambda n: n * 10)) == "{|50|}"

    def test_freezer_may_return_a_builder(self):
        builder = SporeBuilder().append(("a", "b"), lambda t: SporeBuilder().append(t[0]).append(t[1]))
        assert frozen(builder) == "{|{|a_|_b|}|}"

    def test_enum_ordinal(self):
        assert frozen(SporeBuilder().append(Status.INACTIVE)) == "{|1|}"

    def test_nested_builder(self):
        nested = SporeBuilder().append("x")
        assert frozen(SporeBuilder().append(nested)) == "{|{|x|}|}"

    def test_sporable(self):
        assert frozen(SporeBuilder().append(Tag("t"))) == "{|{|{|spr_|_v3_|_utag|}_|_t|}|}"

    def test_sentinels(self):
        spore = SporeBuilder().append_null_payload().append_as_empty_collection().build()
        assert spore.children == (NULL_SPORE, EMPTY_COLLECTION_SPORE)

    def test_spore_appended_as_is(self):
        child = CompositeSpore(None, (AtomicSpore("q"),))
        assert SporeBuilder().append(child).build().children[0] is child


# ---------------------------------------------------------------------------
# Collections and maps
# ---------------------------------------------------------------------------

class TestCollections:
    def test_null_collection(self):
        assert frozen(SporeBuilder().append_as_collection(None)) == "{|--|}"

    def test_empty_collection(self):
        assert frozen(SporeBuilder().append_as_collection([])) == "{|-e-|}"

    def test_collection(self):
        assert frozen(SporeBuilder().append_as_collection([1, 2, 3])) == "{|{|1_|_2_|_3|}|}"

    def test_collection_with_freezer(self):
        builder = SporeBuilder().append_as_collection([1, 2], lambda n: n * 2)
        assert frozen(builder) == "{|{|2_|_4|}|}"

    def test_collection_none_elements(self):
        builder = SporeBuilder().append_as_collection(["a", None], must_not_be_called_for_none)
        assert frozen(builder) == "{|{|A_|_--|}|}"

    def test_two_null_elements(self):
        wrapper = SporeBuilder().append_as_collection([None, None]).build().children[0]
        assert not wrapper.is_payload_null()
        assert len(wrapper.children) == 2

    def test_collection_of_sporables(self):
        builder = SporeBuilder().append_as_collection([Tag("a"), Tag("b")])
        assert frozen(builder) == "{|{|{|{|spr_|_v3_|_utag|}_|_a|}_|_{|{|spr_|_v3_|_utag|}_|_b|}|}|}"

    def test_stream(self):
        assert frozen(SporeBuilder().append_as_stream(n for n in range(3))) == "{|{|0_|_1_|_2|}|}"

    def test_empty_stream(self):
        assert frozen(SporeBuilder().append_as_stream(iter(()))) == "{|-e-|}"

    def test_null_stream(self):
        assert frozen(SporeBuilder().append_as_stream(None)) == "{|--|}"


class TestMaps:
    def test_null_map(self):
        assert frozen(SporeBuilder().append_as_map(None)) == "{|--|}"

    def test_empty_map(self):
        assert frozen(SporeBuilder().append_as_map({})) == "{|-e-|}"

    def test_interleaved(self):
        assert frozen(SporeBuilder().append_as_map({"a": 1, "b": 2})) == "{|{|a_|_1_|_b_|_2|}|}"

    def test_same_as_list(self):
        as_map = SporeBuilder().append_as_map({"a": 1, "b": 2}).build()
        as_list = SporeBuilder().append_as_collection(["a", 1, "b", 2]).build()
        assert as_map == as_list

    def test_freezers(self):
        builder = SporeBuilder().append_as_map({"a": 1}, str.upper, lambda n: n + 1)
        assert frozen(builder) == "{|{|A_|_2|}|}"

    def test_none_key_and_value(self):
        builder = SporeBuilder().append_as_map({None: "x", "k": None}, must_not_be_called_for_none)
        assert frozen(builder) == "{|{|--_|_x_|_K_|_--|}|}"


def must_not_be_called_for_none(value):
    assert value is not None
    return value.upper()


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

def test_build_returns_a_snapshot():
    builder = SporeBuilder().append("a")
    first = builder.build()
    builder.append("b")
    assert len(first.children) == 1
    assert len(builder.build().children) == 2


def test_len_and_repr():
    builder = SporeBuilder("1").append("a").append("b")
    assert len(builder) == 2
    assert repr(builder) == "SporeBuilder(spore_count=2)"


def test_chaining_returns_builder():
    builder = SporeBuilder()
    assert builder.append("a") is builder
    assert builder.append_as_collection([]) is builder
    assert builder.append_as_map(None) is builder
    assert builder.version("1") is builder


@pytest.mark.parametrize("value", ["", "text", "with space"])
def test_plain_strings_are_atomic(value):
    assert SporeBuilder().append(value).build().children == (AtomicSpore(value),)
