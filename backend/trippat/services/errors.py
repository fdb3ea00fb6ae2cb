"""Error taxonomy shared by the matching and pricing services."""


class TrippatError(Exception):
    """Base class for errors raised by Trippat services."""


class NotFoundError(TrippatError):
    """A package, hotel, or supplier city could not be resolved."""


class ValidationError(TrippatError):
    """Required input is missing or inconsistent."""


class SupplierError(TrippatError):
    """The hotel supplier API failed or returned an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SupplierAuthError(SupplierError):
    pass


class SupplierRateLimitError(SupplierError):
    pass


class SupplierTransportError(SupplierError):
    """Connection failure or timeout talking to the supplier."""


class PartialFailure(TrippatError):
    """One hotel stay could not be priced; the rest of the quote stands."""

    def __init__(self, hotel_id: str, message: str):
        super().__init__(message)
        self.hotel_id = hotel_id
