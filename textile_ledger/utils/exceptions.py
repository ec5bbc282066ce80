class LedgerException(Exception):
    """Base exception for all ledger-related errors"""
    def __init__(self, message: str, code: str = "LEDGER_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

class RecordNotFoundError(LedgerException):
    def __init__(self, message: str = "The requested record was not found", code: str = "NOT_FOUND"):
        super().__init__(message, code=code)

class EntryNotFoundError(RecordNotFoundError):
    def __init__(self, message: str = "Ledger entry not found"):
        super().__init__(message, code="ENTRY_NOT_FOUND")

class BillNotFoundError(RecordNotFoundError):
    def __init__(self, message: str = "Bill not found"):
        super().__init__(message, code="BILL_NOT_FOUND")

class KhataNotFoundError(RecordNotFoundError):
    def __init__(self, message: str = "Khata not found"):
        super().__init__(message, code="KHATA_NOT_FOUND")

class PartyNotFoundError(RecordNotFoundError):
    def __init__(self, message: str = "Party not found"):
        super().__init__(message, code="PARTY_NOT_FOUND")

class DuplicateRecordError(LedgerException):
    def __init__(self, message: str = "A record with this unique value already exists"):
        super().__init__(message, code="DUPLICATE_RECORD")

class BusinessRuleError(LedgerException):
    def __init__(self, message: str, code: str = "BUSINESS_RULE_VIOLATION"):
        super().__init__(message, code=code)

class PaymentExceedsRemainingError(BusinessRuleError):
    def __init__(self, message: str = "Transaction amount cannot exceed the remaining amount", remaining_amount=None):
        self.remaining_amount = remaining_amount
        super().__init__(message, code="PAYMENT_EXCEEDS_REMAINING")

class ConflictingKhataTagError(BusinessRuleError):
    def __init__(self, message: str = "Entry text carries a tag for a different khata"):
        super().__init__(message, code="CONFLICTING_KHATA_TAG")

class InvalidStatusTransitionError(BusinessRuleError):
    def __init__(self, message: str = "Status transition is not allowed"):
        super().__init__(message, code="INVALID_STATUS_TRANSITION")
