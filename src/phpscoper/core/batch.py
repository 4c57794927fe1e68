"""Concurrent scoping of many files sharing one registry.

The per-file transformation only shares the symbol registry, so files are
scoped in any order on a thread pool. File-level failures (parse errors,
unsupported constructs, failing patchers) are collected or stop the batch
depending on the :class:`ErrorStrategy`. A registry conflict means the run
as a whole is inconsistent and always aborts it.

Example:
    >>> scoper = create_scoper(ScoperConfig(prefix="Humbug"), SymbolsRegistry())
    >>> result = scope_files(scoper, {"a.php": "<?php new Foo();"}, "Humbug")
    >>> result.success
    True
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

from phpscoper.core.symbol_registry import RegistryConflictError
from phpscoper.core.whitelist import Whitelist
from phpscoper.processors.node_traverser import UnsupportedConstructError
from phpscoper.processors.php_parser import ParseError
from phpscoper.scoper.patch_scoper import PatchError
from phpscoper.utils.logger import get_logger

if TYPE_CHECKING:
    from phpscoper.scoper.base import Patcher, Scoper

logger = get_logger("phpscoper.core.batch")

# Errors that fail one file without invalidating the others
FILE_ERRORS = (ParseError, UnsupportedConstructError, PatchError)


class ErrorStrategy(Enum):
    """How a batch reacts to a file that cannot be scoped.

    Strategies:
        CONTINUE: Record the failure and scope the remaining files.
        STOP: Record the failure and skip files not started yet.
    """
    CONTINUE = "continue"
    STOP = "stop"


@dataclass
class ScopeResult:
    """Result of scoping a single file.

    Attributes:
        file_path: Path of the file.
        success: Whether the file was scoped.
        contents: Scoped contents, None on failure.
        error: Error message, None on success.
        skipped: True when the file was not attempted after a failure.
    """
    file_path: str
    success: bool
    contents: Optional[str] = None
    error: Optional[str] = None
    skipped: bool = False


@dataclass
class BatchResult:
    """Result of a batch run.

    Attributes:
        success: True when every file was scoped.
        results: One ScopeResult per input file, in input order.
        metadata: Timing and counters.
    """
    success: bool
    results: list[ScopeResult] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def scoped_files(self) -> dict[str, str]:
        return {r.file_path: r.contents for r in self.results if r.success and r.contents is not None}

    @property
    def failed_files(self) -> list[ScopeResult]:
        return [r for r in self.results if not r.success and not r.skipped]

    @property
    def errors(self) -> list[str]:
        return [f"{r.file_path}: {r.error}" for r in self.failed_files]


def scope_files(
    scoper: "Scoper",
    files: Mapping[str, str],
    prefix: str,
    patchers: Sequence["Patcher"] = (),
    whitelist: Optional[Whitelist] = None,
    max_workers: int = 4,
    error_strategy: ErrorStrategy = ErrorStrategy.CONTINUE,
) -> BatchResult:
    """Scope every file of ``files`` (path -> contents) with ``scoper``.

    Raises:
        RegistryConflictError: If two files rename a symbol differently.
        ValueError: If ``max_workers`` is not positive.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be a positive integer")

    whitelist = whitelist if whitelist is not None else Whitelist.create_empty()
    stop_requested = threading.Event()
    start_time = time.monotonic()

    def scope_one(file_path: str, contents: str) -> ScopeResult:
        if stop_requested.is_set():
            return ScopeResult(file_path, False, error="skipped after earlier failure", skipped=True)
        try:
            scoped = scoper.scope(file_path, contents, prefix, patchers, whitelist)
        except RegistryConflictError:
            stop_requested.set()
            raise
        except FILE_ERRORS as e:
            if error_strategy is ErrorStrategy.STOP:
                stop_requested.set()
            logger.error(f"Failed to scope {file_path}: {e}")
            return ScopeResult(file_path, False, error=str(e))
        return ScopeResult(file_path, True, contents=scoped)

    logger.info(f"Scoping {len(files)} files with prefix {prefix} ({max_workers} workers)")

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="phpscoper") as executor:
        futures = [executor.submit(scope_one, path, contents) for path, contents in files.items()]
        # Results in input order; a registry conflict re-raises from its future
        results = [future.result() for future in futures]

    result = BatchResult(success=all(r.success for r in results), results=results)
    result.metadata = {
        "total_files": len(results),
        "scoped_files": sum(1 for r in results if r.success),
        "failed_files": len(result.failed_files),
        "skipped_files": sum(1 for r in results if r.skipped),
        "elapsed_seconds": time.monotonic() - start_time,
    }
    logger.info(
        f"Scoped {result.metadata['scoped_files']}/{len(results)} files "
        f"in {result.metadata['elapsed_seconds']:.2f}s"
    )
    return result
