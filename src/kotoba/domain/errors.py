"""Error types raised by the progression engine."""


class KotobaError(Exception):
    """Base class for all kotoba errors."""


class InvalidInputError(KotobaError, ValueError):
    """A caller passed input that violates an operation's contract."""


class RetiredItemError(InvalidInputError):
    """A burned item was submitted for scheduling."""


class CatalogError(KotobaError):
    """The achievement catalog is malformed."""
