"""Top-level splitting of a frozen composite's interior."""

from __future__ import annotations

from .errors import MalformedFrozenString
from .model import PREFIX, SEPARATOR, SUFFIX


def strip_limits(frozen: str) -> str:
    """Remove the outer ``{|`` / ``|}`` pair from a frozen composite."""
    if len(frozen) < len(PREFIX) + len(SUFFIX):
        raise MalformedFrozenString(f"Unknown spore format: {frozen}")
    return frozen[len(PREFIX):len(frozen) - len(SUFFIX)]


def split_top_level(interior: str) -> list[str]:
    """Split *interior* on separators that sit at nesting depth zero.

    Depth is tracked by counting literal ``{|`` and ``|}`` occurrences since
    the last split; payload text is assumed never to contain either token or
    the separator itself.

    Example::

        "a_|_{|b_|_c|}_|_d"  →  ["a", "{|b_|_c|}", "d"]

    An interior without any separator is a single member, so ``""`` gives
    ``[""]``.
    """
    members: list[str] = []
    start = 0
    opened = closed = 0
    i = 0
    while i < len(interior):
        if interior.startswith(PREFIX, i):
            opened += 1
        elif interior.startswith(SUFFIX, i):
            closed += 1
        elif interior.startswith(SEPARATOR, i) and opened == closed:
            members.append(interior[start:i])
            i += len(SEPARATOR)
            start = i
            opened = closed = 0
            continue
        i += 1

    if opened != closed:
        raise MalformedFrozenString(
            f"Unbalanced member ({opened} opened, {closed} closed): {interior[start:]}"
        )
    members.append(interior[start:])
    return members
