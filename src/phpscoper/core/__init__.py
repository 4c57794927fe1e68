"""Core scoping model.

This package provides the symbol model, the native symbol table, the
exclusion policy, the classifier, the run-wide registry and the run
configuration. The batch runner lives in :mod:`phpscoper.core.batch` and is
imported from there, since it depends on the scoper chain.

Classes:
    ScoperConfig: Configuration data model
    UnsupportedConstructPolicy: Policy for unclassifiable constructs
    SymbolKind: Namespace, class, function or constant
    Reflector: Native PHP symbol table
    Whitelist: Exclusion policy
    SymbolClassifier: Decides whether a symbol is renamed
    Classification: Classifier outcome
    SymbolsRegistry: Run-wide rename ledger
    RenameRecord: One recorded rename
    RegistryConflictError: Exception for inconsistent renames
"""

from phpscoper.core.classifier import Classification, SymbolClassifier
from phpscoper.core.config import ScoperConfig, UnsupportedConstructPolicy
from phpscoper.core.reflector import Reflector
from phpscoper.core.symbol_registry import RegistryConflictError, RenameRecord, SymbolsRegistry
from phpscoper.core.symbols import SymbolKind
from phpscoper.core.whitelist import Whitelist

__all__ = [
    "ScoperConfig",
    "UnsupportedConstructPolicy",
    "SymbolKind",
    "Reflector",
    "Whitelist",
    "SymbolClassifier",
    "Classification",
    "SymbolsRegistry",
    "RenameRecord",
    "RegistryConflictError",
]
