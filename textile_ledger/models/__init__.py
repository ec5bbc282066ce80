
from textile_ledger.database import Base, LedgerBase
from .ledger_entry import LedgerEntry, LedgerTransaction
from .accounting import Khata, Party, Bill, Transaction

__all__ = [
    "Base", "LedgerBase",
    "LedgerEntry", "LedgerTransaction",
    "Khata", "Party", "Bill", "Transaction",
]
