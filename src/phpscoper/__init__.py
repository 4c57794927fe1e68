"""phpscoper: prefix the symbols of a PHP code base under a namespace."""

__version__ = "0.1.0"
