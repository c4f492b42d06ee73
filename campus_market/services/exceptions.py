# exceptions.py


class MarketError(Exception):
    """Base class for every error raised by the service layer."""

    pass


class FieldValidationError(MarketError):
    """Raised when a single input field holds an unacceptable value."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class InvalidCriteria(MarketError):
    """Raised when catalog criteria break the query engine's input contract."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class NotAuthenticated(MarketError):
    """Raised when an operation needs a signed in user and there is none."""

    pass


class PermissionDenied(MarketError):
    """Raised when a user tries to mutate something they do not own."""

    pass


class NotFound(MarketError):
    """Raised when the requested entity does not exist."""

    pass


class DuplicateWishlistEntry(MarketError):
    """Raised when a listing is already on the user's wishlist."""

    pass


class DuplicateUser(MarketError):
    """Raised when a user registers twice."""

    pass


class StoreError(MarketError):
    """Raised when the data store or the object store call fails."""

    pass
