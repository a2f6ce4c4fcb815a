import enum


class DocumentType(str, enum.Enum):
    INVOICE = "invoice"
    QUOTE = "quote"

    @property
    def prefix(self) -> str:
        return "INV" if self is DocumentType.INVOICE else "Q"

    @property
    def number_width(self) -> int:
        # INV-0001 vs Q-00001
        return 4 if self is DocumentType.INVOICE else 5

    @property
    def seed(self) -> str:
        return f"{self.prefix}-{1:0{self.number_width}d}"

    @property
    def deadline_field(self) -> str:
        """Name of the type-specific deadline: due date or validity date."""
        return "due_date" if self is DocumentType.INVOICE else "valid_until"


class InvoiceStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELED = "canceled"


class QuoteStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class WorkflowState(str, enum.Enum):
    READY = "ready"
    NEEDS_CLARIFICATION = "needs_clarification"
