"""SporeRepl — interactive inspection of frozen spores.

Also provides the ``spore-repl`` CLI entry point via ``main()``.
"""

from __future__ import annotations

import sys
from typing import IO

from .codec import dumps, loads
from .errors import SporeError
from .model import EMPTY_COLLECTION_PAYLOAD, AtomicSpore, Metadata, Spore


# ---------------------------------------------------------------------------
# SporeRepl class (notebook / programmatic use)
# ---------------------------------------------------------------------------

class SporeRepl:
    """Stateful decoder that remembers what it decoded.

    Usage::

        repl = SporeRepl()
        repl.eval("{|{|spr_|_v1_|_uPerson|}_|_Joe_|_36|}")
        repl.last.version()      # → "1"
        repl.history             # every spore decoded so far
        repl.reset()             # clear state
    """

    def __init__(self, legacy_header: bool = False) -> None:
        self.legacy_header = legacy_header
        self.history: list[Spore] = []

    @property
    def last(self) -> Spore | None:
        return self.history[-1] if self.history else None

    def eval(self, text: str) -> Spore:
        """Decode *text* and remember the result."""
        spore = loads(text, legacy_header=self.legacy_header)
        self.history.append(spore)
        return spore

    def reset(self) -> None:
        """Forget every decoded spore."""
        self.history = []


# ---------------------------------------------------------------------------
# CLI helpers
# ---------------------------------------------------------------------------

def _fmt_metadata(metadata: Metadata) -> str:
    entries = metadata.entries if metadata.is_legacy else metadata.entries[1:]
    parts = [f"{entry.kind.name.lower()}={entry.info!r}" for entry in entries]
    if metadata.is_legacy:
        parts.append(f"name={metadata.name_hint!r}")
    return "<" + ", ".join(parts) + ">"


def _fmt_inline(spore: Spore) -> str:
    """Format a spore for compact one-line display."""
    if isinstance(spore, AtomicSpore):
        if spore.is_payload_null():
            return "null"
        if spore.payload == EMPTY_COLLECTION_PAYLOAD:
            return "empty"
        return f'"{spore.payload}"'
    body = "[" + ", ".join(_fmt_inline(child) for child in spore.children) + "]"
    if spore.metadata is not None:
        return _fmt_metadata(spore.metadata) + body
    return body


def _fmt_inspect(spore: Spore, indent: int = 0) -> str:
    """Pretty-print a spore as an indented tree for inspect() / i()."""
    pad = "  " * indent
    if isinstance(spore, AtomicSpore):
        return pad + _fmt_inline(spore)

    head = "Composite"
    if spore.metadata is not None:
        head += " " + _fmt_metadata(spore.metadata)
    if not spore.children:
        return f"{pad}{head} []"
    lines = [f"{pad}{head} ["]
    for child in spore.children:
        lines.append(_fmt_inspect(child, indent + 1))
    lines.append(pad + "]")
    return "\n".join(lines)


def _show_meta(repl: SporeRepl, dest: IO[str]) -> None:
    """Print the metadata of the last decoded spore."""
    last = repl.last
    if last is None:
        print("  (nothing decoded yet)", file=dest)
        return
    if last.metadata is None:
        print("  (no metadata)", file=dest)
        return
    for entry in last.metadata.entries:
        print(f"  {entry.kind.name:<17} : {entry.info!r}", file=dest)
    if last.metadata.is_legacy:
        print(f"  {'NAME':<17} : {last.metadata.name_hint!r}", file=dest)


def _process_line(repl: SporeRepl, line: str, dest: IO[str]) -> bool:
    """Process one input line.  Returns False when the session should end."""
    line = line.strip()
    if not line:
        return True

    # ── Exit ──────────────────────────────────────────────────────────────
    if line in (":q", ":quit"):
        return False

    # ── Control commands ──────────────────────────────────────────────────
    if line == ":meta":
        _show_meta(repl, dest)
        return True

    if line == ":reset":
        repl.reset()
        return True

    if line in (":legacy on", ":legacy off"):
        repl.legacy_header = line.endswith("on")
        return True

    # ── inspect() / i() ───────────────────────────────────────────────────
    for prefix in ("inspect(", "i("):
        if line.startswith(prefix) and line.endswith(")"):
            print(_fmt_inspect(repl.eval(line[len(prefix):-1].strip())), file=dest)
            return True

    # ── ? frozen → canonical form ─────────────────────────────────────────
    if line.startswith("? "):
        print(dumps(repl.eval(line[2:].strip())), file=dest)
        return True

    # ── Batch file ────────────────────────────────────────────────────────
    if line.startswith("?<< "):
        filepath = line[4:].strip()
        try:
            with open(filepath, encoding="utf-8") as fh:
                for file_line in fh:
                    if not _process_line(repl, file_line.rstrip("\n"), dest):
                        break
        except OSError as exc:
            print(f"Error reading '{filepath}': {exc}", file=sys.stderr)
        return True

    # ── Plain frozen string ───────────────────────────────────────────────
    print(_fmt_inline(repl.eval(line)), file=dest)
    return True


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Interactive spore shell (``spore-repl`` / ``python -m spore_core.repl``)."""
    repl = SporeRepl()
    dest: IO[str] = sys.stdout

    print("Spore REPL  (:q to quit  |  :meta  :reset  :legacy on|off  |  ? <frozen>  inspect(<frozen>))")

    while True:
        try:
            line = input("SPORE> ").strip()
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print()
            continue

        try:
            if not _process_line(repl, line, dest):
                break
        except SporeError as exc:
            print(f"Error: {exc}", file=sys.stderr)


if __name__ == "__main__":
    main()
