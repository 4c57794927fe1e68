"""Run-wide ledger of every rename applied by the scoper.

One :class:`SymbolsRegistry` is created per run and shared by all files
(and all worker threads) of that run. It only ever grows: a record, once
written, can be confirmed by later files but never replaced. A second,
different target for the same original symbol is a consistency violation
and raises :class:`RegistryConflictError`.

Downstream tooling (alias and stub generation) reads the registry after the
run through :meth:`SymbolsRegistry.all_renames`.

Example:
    >>> registry = SymbolsRegistry()
    >>> registry.record("Acme\\Kernel", "Humbug\\Acme\\Kernel", SymbolKind.CLASS)
    >>> registry.lookup("acme\\kernel", SymbolKind.CLASS)
    'Humbug\\Acme\\Kernel'
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Iterator

from phpscoper.core.symbols import SymbolKind, normalize_name, strip_leading_separator
from phpscoper.utils.logger import get_logger

logger = get_logger("phpscoper.core.symbol_registry")


class RegistryConflictError(Exception):
    """Raised when one original symbol would be renamed to two different targets.

    Attributes:
        original: The original fully-qualified name.
        kind: Symbol kind.
        existing: Target already recorded.
        attempted: Conflicting target.
        file_path: File that attempted the conflicting record, if known.
        message: Detailed error message.

    Example:
        >>> raise RegistryConflictError("Foo", SymbolKind.CLASS, "A\\Foo", "B\\Foo")
    """

    def __init__(
        self,
        original: str,
        kind: SymbolKind,
        existing: str,
        attempted: str,
        file_path: str | None = None,
    ) -> None:
        self.original = original
        self.kind = kind
        self.existing = existing
        self.attempted = attempted
        self.file_path = file_path
        location = f" (in {file_path})" if file_path else ""
        self.message = (
            f"Conflicting rename for {kind.value} '{original}'{location}: "
            f"already renamed to '{existing}', cannot rename to '{attempted}'"
        )
        super().__init__(self.message)


@dataclass(frozen=True)
class RenameRecord:
    """One rename applied during a run.

    Attributes:
        original: Original fully-qualified name, as first observed.
        renamed: Prefixed fully-qualified name.
        kind: Symbol kind.
        file_path: File in which the rename was first observed.
    """

    original: str
    renamed: str
    kind: SymbolKind
    file_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "original": self.original,
            "renamed": self.renamed,
            "kind": self.kind.value,
            "file_path": self.file_path,
        }


class SymbolsRegistry:
    """Thread-safe, append-only mapping of original symbols to prefixed names.

    Keys are ``(kind, normalised original name)``; targets are compared in
    their normalised form as well, so ``Acme\\Foo`` and ``acme\\foo`` are
    the same class and may be recorded with either spelling.
    """

    def __init__(self) -> None:
        self._records: dict[tuple[SymbolKind, str], RenameRecord] = {}
        self._lock = threading.Lock()

    def record(
        self,
        original: str,
        renamed: str,
        kind: SymbolKind,
        file_path: str | None = None,
    ) -> None:
        """Record that ``original`` was renamed to ``renamed``.

        Recording the same rename twice is a no-op.

        Raises:
            RegistryConflictError: If ``original`` already has another target.
        """
        original = strip_leading_separator(original)
        renamed = strip_leading_separator(renamed)
        key = (kind, normalize_name(original, kind))

        # check-and-insert must be a single critical section
        with self._lock:
            existing = self._records.get(key)
            if existing is None:
                self._records[key] = RenameRecord(original, renamed, kind, file_path)
                logger.debug(f"Recorded {kind.value} rename: {original} -> {renamed}")
                return

            if normalize_name(existing.renamed, kind) != normalize_name(renamed, kind):
                raise RegistryConflictError(
                    original, kind, existing.renamed, renamed, file_path
                )

    def lookup(self, original: str, kind: SymbolKind) -> str | None:
        """Return the prefixed name recorded for ``original``, if any."""
        key = (kind, normalize_name(original, kind))
        with self._lock:
            record = self._records.get(key)
        return record.renamed if record else None

    def get_record(self, original: str, kind: SymbolKind) -> RenameRecord | None:
        key = (kind, normalize_name(original, kind))
        with self._lock:
            return self._records.get(key)

    def all_renames(self) -> list[RenameRecord]:
        """Return every record, sorted by kind then original name."""
        with self._lock:
            records = list(self._records.values())
        return sorted(records, key=lambda r: (r.kind.value, r.original.lower()))

    def renames_of_kind(self, kind: SymbolKind) -> list[RenameRecord]:
        return [record for record in self.all_renames() if record.kind is kind]

    def merge(self, other: "SymbolsRegistry") -> None:
        """Fold another registry into this one (e.g. from a worker process).

        Raises:
            RegistryConflictError: If both registries disagree on a symbol.
        """
        for record in other.all_renames():
            self.record(record.original, record.renamed, record.kind, record.file_path)

    def to_dict(self) -> dict[str, Any]:
        """Serialise for logging/debugging."""
        records = self.all_renames()
        return {
            "record_count": len(records),
            "records": [record.to_dict() for record in records],
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[RenameRecord]:
        return iter(self.all_renames())

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, tuple) or len(item) != 2:
            return False
        original, kind = item
        return self.lookup(original, kind) is not None
