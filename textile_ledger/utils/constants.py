from decimal import Decimal

class LedgerEntryType:
    KHATA = "KHATA"
    BILL = "BILL"
    TRANSACTION = "TRANSACTION"
    CHEQUE = "CHEQUE"
    INVENTORY = "INVENTORY"
    BANK = "BANK"
    PAYABLE = "PAYABLE"
    RECEIVABLE = "RECEIVABLE"

    ALL = (KHATA, BILL, TRANSACTION, CHEQUE, INVENTORY, BANK, PAYABLE, RECEIVABLE)

class LedgerEntryStatus:
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    PAID = "PAID"
    CLEARED = "CLEARED"
    BOUNCED = "BOUNCED"
    REPLACED = "REPLACED"

    ALL = (PENDING, PARTIAL, COMPLETED, CANCELLED, PAID, CLEARED, BOUNCED, REPLACED)
    SETTLED = (COMPLETED, PAID, CLEARED)

class PaymentMode:
    CASH = "CASH"
    CHEQUE = "CHEQUE"
    ONLINE = "ONLINE"

    ALL = (CASH, CHEQUE, ONLINE)

class BillType:
    PURCHASE = "PURCHASE"
    SALE = "SALE"
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"
    OTHER = "OTHER"

    ALL = (PURCHASE, SALE, EXPENSE, INCOME, OTHER)

class BillStatus:
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    CANCELLED = "CANCELLED"

    ALL = (PENDING, PARTIAL, PAID, CANCELLED)

class PartyType:
    VENDOR = "VENDOR"
    CUSTOMER = "CUSTOMER"
    EMPLOYEE = "EMPLOYEE"
    OTHER = "OTHER"

    ALL = (VENDOR, CUSTOMER, EMPLOYEE, OTHER)

class TransactionType:
    PURCHASE = "PURCHASE"
    SALE = "SALE"
    BANK_DEPOSIT = "BANK_DEPOSIT"
    BANK_WITHDRAWAL = "BANK_WITHDRAWAL"
    CASH_PAYMENT = "CASH_PAYMENT"
    CASH_RECEIPT = "CASH_RECEIPT"
    CHEQUE_PAYMENT = "CHEQUE_PAYMENT"
    CHEQUE_RECEIPT = "CHEQUE_RECEIPT"
    CHEQUE_RETURN = "CHEQUE_RETURN"
    DYEING_EXPENSE = "DYEING_EXPENSE"
    INVENTORY_ADJUSTMENT = "INVENTORY_ADJUSTMENT"
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"
    TRANSFER = "TRANSFER"
    OTHER = "OTHER"

    ALL = (
        PURCHASE, SALE, BANK_DEPOSIT, BANK_WITHDRAWAL, CASH_PAYMENT, CASH_RECEIPT,
        CHEQUE_PAYMENT, CHEQUE_RECEIPT, CHEQUE_RETURN, DYEING_EXPENSE,
        INVENTORY_ADJUSTMENT, EXPENSE, INCOME, TRANSFER, OTHER,
    )

# 1 paisa; anything closer to zero than this counts as settled
PAYMENT_TOLERANCE = Decimal("0.01")

BILL_REFERENCE_PREFIX = "BILL-"
TRANSACTION_REFERENCE_PREFIX = "TXN-"

DEFAULT_KHATA_NAME = "Main Account Book"
DEFAULT_KHATA_DESCRIPTION = "Primary business khata"
