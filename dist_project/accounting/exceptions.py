from decimal import Decimal


class UnbalancedJournalError(Exception):
    """Raised when a JournalEntry fails double-entry balance check."""

    def __init__(self, total_debit, total_credit, message=None):
        self.total_debit = Decimal(total_debit)
        self.total_credit = Decimal(total_credit)
        self.difference = abs(self.total_debit - self.total_credit)
        if message is None:
            message = (
                f"Total debits ({self.total_debit:.2f}) must equal "
                f"total credits ({self.total_credit:.2f}). "
                f"Difference: {self.difference:.2f}"
            )
        super().__init__(message)


class JournalLineError(Exception):
    """Raised when a journal line is not exactly one-sided,
    or when an entry has fewer than two lines (index is None then)."""

    def __init__(self, message, index=None):
        self.index = index
        super().__init__(message)


class AlreadyPostedDifferentPayload(Exception):
    """Raised when a JournalEntry already posted with different payload """
    pass


class NotFoundError(Exception):
    """Base for lookups that must not be mistaken for a zero balance."""
    pass


class AccountNotFound(NotFoundError):
    def __init__(self, code):
        self.code = code
        super().__init__(f"Account '{code}' not found")


class PartyNotFound(NotFoundError):
    def __init__(self, party_id):
        self.party_id = party_id
        super().__init__(f"Party ledger '{party_id}' not found")
