from src.common.exceptions import AppError


class EmptyDocumentError(AppError):
    """Raised when a document has no usable line items."""
    def __init__(self, document_type: str):
        self.message = f"The {document_type} must contain at least one line item."
        super().__init__(self.message)


class InvalidStatusError(AppError):
    def __init__(self, document_type: str, status: str):
        self.message = f"'{status}' is not a valid {document_type} status."
        super().__init__(self.message)
