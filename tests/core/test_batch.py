"""Tests for the concurrent batch runner."""

import logging
from unittest.mock import MagicMock

import pytest

from phpscoper.core.batch import BatchResult, ErrorStrategy, ScopeResult, scope_files
from phpscoper.core.symbol_registry import RegistryConflictError
from phpscoper.core.symbols import SymbolKind
from phpscoper.processors.php_parser import ParseError
from phpscoper.scoper.base import Scoper


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_scoper(failures=None):
    """Mock scoper upper-casing contents, raising for selected paths."""
    failures = failures or {}
    scoper = MagicMock(spec=Scoper)

    def fake_scope(file_path, contents, prefix, patchers, whitelist):
        if file_path in failures:
            raise failures[file_path]
        return contents.upper()

    scoper.scope.side_effect = fake_scope
    return scoper


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestScopeFiles:
    """Batch scoping with a mocked scoper."""

    def test_all_files_scoped_in_input_order(self):
        files = {f"src/F{i}.php": f"file {i}" for i in range(10)}

        result = scope_files(make_scoper(), files, "Humbug", max_workers=3)

        assert isinstance(result, BatchResult)
        assert result.success is True
        assert [r.file_path for r in result.results] == list(files)
        assert result.scoped_files["src/F3.php"] == "FILE 3"
        assert result.metadata["total_files"] == 10
        assert result.metadata["scoped_files"] == 10

    def test_scoper_receives_arguments(self, empty_whitelist):
        scoper = make_scoper()
        patchers = [lambda path, prefix, text: text]

        scope_files(scoper, {"a.php": "x"}, "Humbug", patchers, empty_whitelist)

        scoper.scope.assert_called_once_with("a.php", "x", "Humbug", patchers, empty_whitelist)

    def test_continue_collects_failures(self, caplog):
        error = ParseError("Syntax error, unexpected ';'", 3)
        scoper = make_scoper({"bad.php": error})

        with caplog.at_level(logging.ERROR, logger="phpscoper.core.batch"):
            result = scope_files(
                scoper, {"bad.php": "x", "good.php": "y"}, "Humbug",
                error_strategy=ErrorStrategy.CONTINUE,
            )

        assert result.success is False
        assert result.scoped_files == {"good.php": "Y"}
        assert len(result.failed_files) == 1
        assert result.failed_files[0].error == "Syntax error, unexpected ';' on line 3"
        assert result.errors == ["bad.php: Syntax error, unexpected ';' on line 3"]
        assert "Failed to scope bad.php" in caplog.text

    def test_stop_skips_remaining_files(self):
        scoper = make_scoper({"a.php": ParseError("Syntax error", 1)})
        files = {"a.php": "x", "b.php": "y", "c.php": "z"}

        result = scope_files(scoper, files, "Humbug", max_workers=1, error_strategy=ErrorStrategy.STOP)

        assert result.success is False
        skipped = [r.file_path for r in result.results if r.skipped]
        assert skipped == ["b.php", "c.php"]
        assert result.metadata["skipped_files"] == 2
        assert scoper.scope.call_count == 1

    def test_registry_conflict_aborts(self):
        conflict = RegistryConflictError("Foo", SymbolKind.CLASS, "A\\Foo", "B\\Foo")
        scoper = make_scoper({"b.php": conflict})

        with pytest.raises(RegistryConflictError):
            scope_files(scoper, {"a.php": "x", "b.php": "y"}, "Humbug")

    def test_unexpected_errors_propagate(self):
        scoper = make_scoper({"a.php": ValueError("Invalid prefix")})

        with pytest.raises(ValueError, match="Invalid prefix"):
            scope_files(scoper, {"a.php": "x"}, "Humbug")

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError, match="max_workers"):
            scope_files(make_scoper(), {}, "Humbug", max_workers=0)


class TestScopeFilesEndToEnd:
    """Batch scoping with the real scoper chain."""

    def test_shared_registry_across_files(self, scoper, registry):
        files = {
            "src/Foo.php": "<?php\n\nnamespace Acme;\n\nclass Foo {}\n",
            "src/Bar.php": "<?php\n\nnamespace App;\n\nnew \\Acme\\Foo();\n",
        }

        result = scope_files(scoper, files, "Humbug", max_workers=2)

        assert result.success is True
        assert "new \\Humbug\\Acme\\Foo();" in result.scoped_files["src/Bar.php"]
        assert registry.lookup("Acme\\Foo", SymbolKind.CLASS) == "Humbug\\Acme\\Foo"

    def test_result_dataclass_defaults(self):
        result = ScopeResult("a.php", True, contents="x")

        assert result.error is None
        assert result.skipped is False
