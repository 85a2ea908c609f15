"""API exception module.

Every engine failure is one of these. They are raised straight from the
services and rendered by FastAPI, with the failure kind kept intact.
"""
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    kind = "Error"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
    ):
        super().__init__(status_code=status_code, detail=detail)


class NotFoundError(APIException):
    """Referenced transaction, line, item or category does not exist."""

    kind = "NotFound"

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidStateError(APIException):
    """Mutation attempted on a record that no longer allows it."""

    kind = "InvalidState"

    def __init__(self, detail: str = "Invalid state for this operation"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidInputError(APIException):
    """Malformed quantity, payment or date range."""

    kind = "InvalidInput"

    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InsufficientPaymentError(APIException):
    """Paid amount below the transaction total."""

    kind = "InsufficientPayment"

    def __init__(self, detail: str = "Insufficient payment amount"):
        super().__init__(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=detail)


class StoreFailureError(APIException):
    """Underlying persistence error."""

    kind = "StoreFailure"

    def __init__(self, detail: str = "Storage failure"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
