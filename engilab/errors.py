"""Exception hierarchy shared by the engilab simulation core.

Every error raised by the core is recoverable at the call site.  Each class also
derives from the closest builtin exception so callers may catch either.
"""

from __future__ import annotations


class EngilabError(Exception):
    """Base class for all recoverable engilab errors."""


class EmptyError(EngilabError, IndexError):
    """Raised when popping, dequeuing or peeking an empty structure."""


class InvalidInput(EngilabError, ValueError):
    """Raised when user supplied input is rejected; prior state is retained."""


class InvalidWeight(InvalidInput):
    """Raised when an edge weight is not a finite number."""


class ConfigurationError(EngilabError, ValueError):
    """Raised when physical parameters would make a model ill-defined."""


class MalformedImport(EngilabError, ValueError):
    """Raised when an imported graph document lacks its required fields."""
