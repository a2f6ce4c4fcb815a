from src.common.exceptions import AppError


class ExtractionError(AppError):
    """
    Raised when text cannot be turned into structured data.

    Providers raise it for empty or non-JSON answers (the service then moves
    on to the next provider); the service raises it when there is no text to
    extract from.
    """
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)
