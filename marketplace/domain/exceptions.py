class MarketplaceError(Exception):
    """Base class for marketplace exceptions."""

    pass


class ValidationFailure(MarketplaceError):
    """Raised when a required filter or request field is missing or malformed."""

    pass


class NotFoundCondition(MarketplaceError):
    """Raised when a referenced entity is absent or was already removed."""

    pass


class TransientUnavailable(MarketplaceError):
    """Raised when the underlying store timed out or the caller cancelled.

    Services never retry these; they propagate to the caller unchanged.
    """

    pass


class OperationCancelled(TransientUnavailable):
    """Raised when a cancellation signal is observed before a storage call."""

    pass
