"""Base error for the bookline package."""


class BooklineError(Exception):
    """Base class for all bookline errors."""
