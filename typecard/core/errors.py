class CardError(Exception):
    """Base class for failures that abort card generation."""


class InvalidRequestError(CardError):
    """Raised when request parameters are missing or malformed."""


class NotFoundError(CardError):
    """Raised when GitHub cannot resolve the user or reports query errors."""


class AggregationEmptyError(CardError):
    """Raised when no commits were classified, so percentages are undefined."""


class UpstreamError(CardError):
    """Raised when a GitHub or image request fails in transport."""
