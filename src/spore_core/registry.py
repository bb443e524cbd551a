"""Type registry for metadata-directed instantiation.

Sporable types are registered ahead of time under their unique identifier,
either explicitly or with the :func:`sporable` class decorator::

    @sporable(version="001", unique_identifier="FilterModelUniqueId")
    class FilterModel(Sporable):
        ...

    model = spore.to_instance()      # looks up "FilterModelUniqueId"

Every registry operation holds the registry's lock, so a lookup is atomic
with respect to concurrent registration.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, TypeVar

from .errors import (
    InstantiationFailed,
    MissingMetadata,
    TypeResolutionAmbiguous,
    TypeResolutionFailed,
)
from .freeze import can_populate, populate
from .model import MetadataKind, Spore

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=type)


# ---------------------------------------------------------------------------
# Registrations and resolution results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Registration:
    unique_identifier: str
    factory: Callable[[], Any]
    cls: type | None = None
    name: str = ""


class ResolutionOutcome(Enum):
    FOUND = auto()
    NOT_FOUND = auto()
    AMBIGUOUS = auto()


@dataclass(frozen=True, slots=True)
class Resolution:
    unique_identifier: str
    candidates: tuple[Registration, ...] = ()

    @property
    def outcome(self) -> ResolutionOutcome:
        if not self.candidates:
            return ResolutionOutcome.NOT_FOUND
        if len(self.candidates) > 1:
            return ResolutionOutcome.AMBIGUOUS
        return ResolutionOutcome.FOUND

    def registration(self) -> Registration:
        """The single matching registration; raises for the other outcomes."""
        outcome = self.outcome
        if outcome is ResolutionOutcome.NOT_FOUND:
            raise TypeResolutionFailed(
                f"Could not find sporable class for identifier {self.unique_identifier}"
            )
        if outcome is ResolutionOutcome.AMBIGUOUS:
            names = ", ".join(c.name for c in self.candidates)
            raise TypeResolutionAmbiguous(
                f"Found several sporable classes for identifier {self.unique_identifier}: {names}"
            )
        return self.candidates[0]


# ---------------------------------------------------------------------------
# SporeRegistry
# ---------------------------------------------------------------------------

class SporeRegistry:
    """Maps unique type identifiers to zero-argument factories."""

    def __init__(self) -> None:
        self._registrations: dict[str, list[Registration]] = {}
        self._lock = threading.RLock()

    def register(
        self,
        unique_identifier: str,
        factory: Callable[[], Any],
        *,
        cls: type | None = None,
        name: str | None = None,
    ) -> Registration:
        if not unique_identifier:
            raise ValueError("a registration needs a non-empty unique identifier")
        if cls is None and isinstance(factory, type):
            cls = factory
        if name is None:
            name = _qualified_name(cls if cls is not None else factory)

        registration = Registration(unique_identifier, factory, cls, name)
        with self._lock:
            existing = self._registrations.setdefault(unique_identifier, [])
            if existing:
                logger.warning(
                    "unique identifier %r registered again by %s (already used by %s)",
                    unique_identifier, name, ", ".join(r.name for r in existing),
                )
            existing.append(registration)
        logger.debug("registered %s as %r", name, unique_identifier)
        return registration

    def unregister(self, unique_identifier: str) -> None:
        with self._lock:
            self._registrations.pop(unique_identifier, None)

    def clear(self) -> None:
        with self._lock:
            self._registrations.clear()

    def __contains__(self, unique_identifier: object) -> bool:
        with self._lock:
            return unique_identifier in self._registrations

    def __len__(self) -> int:
        with self._lock:
            return sum(len(regs) for regs in self._registrations.values())

    def resolve(
        self,
        unique_identifier: str,
        type_hint: type | None = None,
        name_hint: str | None = None,
    ) -> Resolution:
        """Find the registrations for *unique_identifier*.

        *type_hint* keeps only registered classes that subclass it;
        *name_hint* keeps only registrations whose qualified name contains it.
        """
        with self._lock:
            candidates = list(self._registrations.get(unique_identifier, ()))

        if type_hint is not None:
            candidates = [
                c for c in candidates if c.cls is not None and issubclass(c.cls, type_hint)
            ]
        if name_hint:
            candidates = [c for c in candidates if name_hint in c.name]

        resolution = Resolution(unique_identifier, tuple(candidates))
        logger.debug("resolved %r: %s", unique_identifier, resolution.outcome.name)
        return resolution


default_registry = SporeRegistry()


def _or_default(registry: SporeRegistry | None) -> SporeRegistry:
    # an empty registry is falsy, so test identity
    return default_registry if registry is None else registry


def _qualified_name(obj: Any) -> str:
    module = getattr(obj, "__module__", None)
    qualname = getattr(obj, "__qualname__", None) or repr(obj)
    return f"{module}.{qualname}" if module else qualname


# ---------------------------------------------------------------------------
# Declaration
# ---------------------------------------------------------------------------

def sporable(
    version: str | None = None,
    unique_identifier: str | None = None,
    *,
    registry: SporeRegistry | None = None,
) -> Callable[[C], C]:
    """Class decorator declaring a sporable type's metadata defaults.

    With a *unique_identifier* the class is also registered, using its
    zero-argument constructor as the factory.
    """
    def decorate(cls: C) -> C:
        cls.__spore_version__ = version
        cls.__spore_unique_identifier__ = unique_identifier
        if unique_identifier:
            _or_default(registry).register(unique_identifier, cls, cls=cls)
        return cls

    return decorate


# ---------------------------------------------------------------------------
# Instantiation
# ---------------------------------------------------------------------------

def instantiate_without_populating(
    spore: Spore,
    registry: SporeRegistry | None = None,
    *,
    type_hint: type | None = None,
    name_hint: str | None = None,
) -> Any:
    """Create an empty instance of the type *spore*'s metadata names."""
    metadata = spore.metadata
    if metadata is None:
        raise MissingMetadata(
            "No metadata present in the spore. Don't know which class to instantiate."
        )
    if not metadata.has(MetadataKind.UNIQUE_IDENTIFIER) or not metadata.unique_identifier():
        raise MissingMetadata(
            "Unique identifier is missing from the spore. "
            "The class which built it must declare one with @sporable."
        )
    registration = _or_default(registry).resolve(
        metadata.unique_identifier(), type_hint, name_hint
    ).registration()

    try:
        instance = registration.factory()
    except Exception as exc:
        raise InstantiationFailed(f"Could not instantiate {registration.name}") from exc
    if instance is None or not can_populate(instance):
        raise InstantiationFailed(
            f"{registration.name} does not implement populate_from_spore"
        )
    return instance


def instantiate(
    spore: Spore,
    registry: SporeRegistry | None = None,
    *,
    type_hint: type | None = None,
    name_hint: str | None = None,
) -> Any:
    """Resolve, construct and populate the type *spore*'s metadata names."""
    instance = instantiate_without_populating(
        spore, registry, type_hint=type_hint, name_hint=name_hint
    )
    return populate(instance, spore)
