"""Freezing of single values and the Sporable capability."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import InstantiationFailed
from .model import NULL_SPORE, AtomicSpore, Spore

if TYPE_CHECKING:
    from .builder import SporeBuilder


class Sporable:
    """Base for domain types that assemble their own spore.

    Subclasses implement :meth:`assemble_spore` and, when they can be thawed,
    :meth:`populate_from_spore`. The class attributes carry the defaults a
    :class:`~spore_core.builder.SporeBuilder` seeds its metadata with; the
    :func:`~spore_core.registry.sporable` decorator sets them.
    """

    __spore_version__: str | None = None
    __spore_unique_identifier__: str | None = None

    def assemble_spore(self) -> SporeBuilder:
        raise NotImplementedError

    def populate_from_spore(self, spore: Spore) -> Sporable:
        return self


def is_sporable(value: Any) -> bool:
    """True for instances that know how to assemble their own spore."""
    return not isinstance(value, type) and callable(getattr(value, "assemble_spore", None))


def can_populate(value: Any) -> bool:
    return not isinstance(value, type) and callable(getattr(value, "populate_from_spore", None))


def populate(instance: Any, spore: Spore) -> Any:
    """Ask *instance* to repopulate itself from *spore* and return the result."""
    if not can_populate(instance):
        raise InstantiationFailed(
            f"{type(instance).__name__} does not implement populate_from_spore"
        )
    result = instance.populate_from_spore(spore)
    return instance if result is None else result


def ordinal(member: Enum) -> int:
    """Zero-based position of *member* in its enum's declaration order."""
    return list(type(member)).index(member)


def freeze(value: Any) -> Spore:
    """Freeze a single value.

    - ``None`` → the null atomic spore
    - a spore → itself
    - an enum member → its ordinal, never its name
    - a sporable → the composite it assembles
    - anything else → an atomic spore of ``str(value)``
    """
    if value is None:
        return NULL_SPORE
    if isinstance(value, Spore):
        return value
    if isinstance(value, Enum):
        return AtomicSpore(str(ordinal(value)))
    if is_sporable(value):
        return value.assemble_spore().build()
    return AtomicSpore(str(value))
