"""Tests for the patch pipeline decorator and the null scoper."""

from unittest.mock import MagicMock

import pytest

from phpscoper.scoper.base import NullScoper, Scoper
from phpscoper.scoper.patch_scoper import PatchError, PatchScoper


@pytest.fixture
def decorated():
    scoper = MagicMock(spec=Scoper)
    scoper.scope.return_value = "Scoped content"
    return scoper


class TestNullScoper:
    def test_returns_contents_unchanged(self, empty_whitelist):
        contents = "<?php\n\nnew Foo();\n"

        assert NullScoper().scope("a.php", contents, "Humbug", [], empty_whitelist) == contents


class TestPatchScoper:
    """Patchers applied left to right over the decorated scoper's output."""

    def test_without_patchers_returns_scoped_content(self, decorated, empty_whitelist):
        scoper = PatchScoper(decorated)

        result = scoper.scope("file.php", "Original content", "Humbug", [], empty_whitelist)

        assert result == "Scoped content"
        decorated.scope.assert_called_once_with(
            "file.php", "Original content", "Humbug", [], empty_whitelist
        )

    def test_single_patcher(self, decorated, empty_whitelist):
        scoper = PatchScoper(decorated)

        result = scoper.scope(
            "file.php", "Original content", "Humbug",
            [lambda path, prefix, text: text.upper()], empty_whitelist,
        )

        assert result == "SCOPED CONTENT"

    def test_patchers_chain_in_order(self, decorated, empty_whitelist):
        calls = []

        def first(path, prefix, text):
            calls.append(("first", text))
            return text + " + first"

        def second(path, prefix, text):
            calls.append(("second", text))
            return f"{prefix}: {text} + second ({path})"

        result = PatchScoper(decorated).scope(
            "file.php", "x", "Humbug", [first, second], empty_whitelist
        )

        assert result == "Humbug: Scoped content + first + second (file.php)"
        assert calls == [("first", "Scoped content"), ("second", "Scoped content + first")]

    def test_failing_patcher_raises_patch_error(self, decorated, empty_whitelist):
        def broken(path, prefix, text):
            raise RuntimeError("boom")

        with pytest.raises(PatchError, match="broken failed on file.php") as excinfo:
            PatchScoper(decorated).scope("file.php", "x", "Humbug", [broken], empty_whitelist)

        assert excinfo.value.file_path == "file.php"
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_non_string_result_raises_patch_error(self, decorated, empty_whitelist):
        with pytest.raises(PatchError, match="expected str, got NoneType"):
            PatchScoper(decorated).scope(
                "file.php", "x", "Humbug", [lambda path, prefix, text: None], empty_whitelist
            )

    def test_patchers_do_not_touch_registry(self, scoper, registry, empty_whitelist):
        def rename_in_text(path, prefix, text):
            return text.replace("Foo", "Bar")

        result = scoper.scope(
            "src/Foo.php", "<?php\n\nnamespace Acme;\n\nclass Foo {}\n",
            "Humbug", [rename_in_text], empty_whitelist,
        )

        assert "class Bar {}" in result
        assert [r.original for r in registry.all_renames()] == ["Acme\\Foo", "Acme"]
