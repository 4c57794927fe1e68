"""
Tests for path_utils module.

Tests cover extension detection used to decide whether a file is PHP.
"""

from pathlib import Path, PurePosixPath

import pytest

from phpscoper.utils.path_utils import (
    ensure_directory,
    get_file_extension,
    has_extension,
    matches_extension,
)


class TestFileExtensions:
    """Test extension helpers."""

    @pytest.mark.parametrize("path, expected", [
        ("src/Kernel.php", ".php"),
        ("src/Kernel.PHP", ".php"),
        ("bin/console", ""),
        ("config/services.yaml", ".yaml"),
        (PurePosixPath("lib/archive.tar.gz"), ".gz"),
    ])
    def test_get_file_extension(self, path, expected):
        assert get_file_extension(path) == expected

    def test_has_extension(self):
        assert has_extension("src/Foo.php")
        assert not has_extension("bin/console")

    def test_matches_extension_with_or_without_dot(self):
        assert matches_extension("src/Foo.php", [".php"])
        assert matches_extension("src/Foo.inc", ["php", "inc"])
        assert matches_extension("src/Foo.PHP", [".php"])

    def test_matches_extension_rejects_others(self):
        assert not matches_extension("src/Foo.phtml", [".php"])
        assert not matches_extension("bin/console", [".php"])


class TestEnsureDirectory:
    """Test directory creation."""

    def test_creates_nested_directories(self, tmp_path):
        target = tmp_path / "a" / "b"

        result = ensure_directory(target)

        assert result == target
        assert target.is_dir()

    def test_existing_directory(self, tmp_path):
        assert ensure_directory(tmp_path) == Path(tmp_path)
