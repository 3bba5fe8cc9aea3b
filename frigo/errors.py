class FrigoError(Exception):
    """Base class for errors the http layer knows how to report."""

    status_code = 500


class ValidationError(FrigoError):
    """Data crossing a boundary did not match its contract."""

    status_code = 400

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        constraint: str | None = None,
        errors: list[dict[str, str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.constraint = constraint
        self.errors = [] if errors is None else errors


class StoreError(FrigoError):
    """The record store failed or refused a request."""

    def __init__(self, message: str, *, store_status: int | None = None) -> None:
        super().__init__(message)
        self.store_status = store_status


class GenerationError(FrigoError):
    """The generation endpoint gave nothing usable. The user has to resubmit."""
