"""The scoper contract and its terminal implementation.

Every scoper transforms the contents of one file and returns the new
contents. Scopers are composed as decorators: each one handles what it
knows and delegates the rest to the scoper it wraps, ending with
:class:`NullScoper`, which returns files unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Sequence

from phpscoper.core.whitelist import Whitelist

# (file_path, prefix, contents) -> patched contents
Patcher = Callable[[str, str, str], str]


class Scoper(ABC):
    """Transforms one file's contents under a prefix."""

    @abstractmethod
    def scope(
        self,
        file_path: str,
        contents: str,
        prefix: str,
        patchers: Sequence[Patcher],
        whitelist: Whitelist,
    ) -> str:
        """Return the scoped contents of ``file_path``.

        Args:
            file_path: Path of the file, used to recognise its type and in
                diagnostics. The file is not read.
            contents: Full text of the file.
            prefix: Namespace prefix.
            patchers: Text-to-text fixups applied after scoping, in order.
            whitelist: Symbols that stay unprefixed.
        """


class NullScoper(Scoper):
    """Returns every file unchanged."""

    def scope(
        self,
        file_path: str,
        contents: str,
        prefix: str,
        patchers: Sequence[Patcher],
        whitelist: Whitelist,
    ) -> str:
        return contents
