class RecommenderError(Exception):
    """Base class for errors raised by the recommender."""


class PersistenceError(RecommenderError):
    """The preference store could not be read or written."""

    def __init__(self, key: str, reason: str = "store unavailable"):
        self.key = key
        self.reason = reason
        super().__init__(f"Preference store failure for '{key}': {reason}")


class CatalogUnavailableError(RecommenderError):
    """A single catalog lookup failed."""

    def __init__(self, kind: str, term: str, cause: Exception | None = None):
        self.kind = kind
        self.term = term
        self.cause = cause
        super().__init__(f"Catalog lookup by {kind} '{term}' failed: {cause}")


class ProfileValidationError(RecommenderError, ValueError):
    """A profile entry or item document is malformed and must be dropped."""
