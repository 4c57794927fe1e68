"""Shared fixtures for scoper tests."""

from __future__ import annotations

import textwrap
from typing import Callable

import pytest

from phpscoper.core.reflector import Reflector
from phpscoper.core.symbol_registry import SymbolsRegistry
from phpscoper.core.whitelist import Whitelist
from phpscoper.scoper.base import Scoper
from phpscoper.scoper.factory import create_scoper


PREFIX = "Humbug"


def php(source: str) -> str:
    """Dedent a PHP snippet written inline in a test."""
    return textwrap.dedent(source).lstrip("\n")


@pytest.fixture
def registry() -> SymbolsRegistry:
    """Fresh registry for one run."""
    return SymbolsRegistry()


@pytest.fixture
def empty_whitelist() -> Whitelist:
    return Whitelist.create_empty()


@pytest.fixture
def reflector() -> Reflector:
    return Reflector.create_with_php_symbols()


@pytest.fixture
def scoper(registry: SymbolsRegistry) -> Scoper:
    """Default scoper chain sharing the ``registry`` fixture."""
    return create_scoper(registry=registry)


@pytest.fixture
def scope(scoper: Scoper, empty_whitelist: Whitelist) -> Callable[..., str]:
    """Scope a snippet with prefix ``Humbug``."""

    def _scope(
        contents: str,
        file_path: str = "src/Foo.php",
        whitelist: Whitelist | None = None,
        patchers=(),
    ) -> str:
        return scoper.scope(
            file_path,
            contents,
            PREFIX,
            patchers,
            whitelist if whitelist is not None else empty_whitelist,
        )

    return _scope
