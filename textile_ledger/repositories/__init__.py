from . import entry_repository as entry_repo
from . import bill_repository as bill_repo
from . import book_repository as book_repo

__all__ = ["entry_repo", "bill_repo", "book_repo"]
