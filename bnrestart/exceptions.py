class SearchError(Exception):
    """Base class for errors raised by the structure search."""


class InvalidConfiguration(SearchError, ValueError):
    pass


class GraphError(SearchError, ValueError):
    pass


class ScoringFailure(SearchError):
    """The scoring oracle raised or returned a score that cannot be compared."""
