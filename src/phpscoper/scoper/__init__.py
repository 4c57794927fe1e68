"""Scoper chain: patch pipeline, PHP scoper and the terminal null scoper."""

from phpscoper.scoper.base import NullScoper, Patcher, Scoper
from phpscoper.scoper.factory import create_scoper
from phpscoper.scoper.patch_scoper import PatchError, PatchScoper
from phpscoper.scoper.php_scoper import PhpScoper, ScopingState

__all__ = [
    "Scoper",
    "Patcher",
    "NullScoper",
    "PhpScoper",
    "ScopingState",
    "PatchScoper",
    "PatchError",
    "create_scoper",
]
