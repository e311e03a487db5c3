"""Errors raised while loading a dataset."""


class DashboardError(Exception):
    """Base error for this package."""


class LoadError(DashboardError):
    """Raised when a dataset cannot be loaded. Nothing is committed."""


class ParseError(LoadError):
    """Raised when the input text is not valid JSON."""


class FormatError(LoadError):
    """Raised when the input parses but its top level is not an array."""


class EmptyDatasetError(LoadError):
    """Raised when the input is valid but yields zero records."""
