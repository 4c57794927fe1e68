"""Post-processing decorator applying user patchers to scoped output."""

from __future__ import annotations

from typing import Any, Sequence

from phpscoper.core.whitelist import Whitelist
from phpscoper.scoper.base import Patcher, Scoper
from phpscoper.utils.logger import get_logger

logger = get_logger("phpscoper.scoper.patch_scoper")


class PatchError(Exception):
    """Raised when a patcher fails or returns something other than text.

    Attributes:
        file_path: File being patched.
        patcher: The failing patcher.
        message: Detailed error message.
    """

    def __init__(self, file_path: str, patcher: Any, reason: str) -> None:
        self.file_path = file_path
        self.patcher = patcher
        name = getattr(patcher, "__name__", type(patcher).__name__)
        self.message = f"Patcher {name} failed on {file_path}: {reason}"
        super().__init__(self.message)


class PatchScoper(Scoper):
    """Scopes through the decorated scoper, then applies the patchers in order.

    Each patcher receives the output of the previous one. A failing patcher
    aborts the file: no partially patched text is returned.

    Example:
        >>> scoper = PatchScoper(NullScoper())
        >>> scoper.scope("foo.php", "Scoped content", "Humbug",
        ...              [lambda path, prefix, text: text.upper()], Whitelist.create_empty())
        'SCOPED CONTENT'
    """

    def __init__(self, decorated_scoper: Scoper) -> None:
        self._decorated = decorated_scoper

    def scope(
        self,
        file_path: str,
        contents: str,
        prefix: str,
        patchers: Sequence[Patcher],
        whitelist: Whitelist,
    ) -> str:
        scoped = self._decorated.scope(file_path, contents, prefix, patchers, whitelist)

        for index, patcher in enumerate(patchers):
            try:
                patched = patcher(file_path, prefix, scoped)
            except Exception as e:
                raise PatchError(file_path, patcher, f"{type(e).__name__}: {e}") from e

            if not isinstance(patched, str):
                raise PatchError(
                    file_path, patcher, f"expected str, got {type(patched).__name__}"
                )

            logger.debug(f"{file_path}: applied patcher {index + 1}/{len(patchers)}")
            scoped = patched

        return scoped
