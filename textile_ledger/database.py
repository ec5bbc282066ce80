from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker
from textile_ledger.config import settings

# Base class for primary schema models (ledger_entries, ledger_transactions)
Base = declarative_base()

# Base class for the separate ledger schema (khatas, parties, bills, transactions)
LedgerBase = declarative_base()


def create_db_engine(url: str):
    if url.startswith("sqlite"):
        # SQLite has no server-side pool; sessions are handed across threadpool workers
        return create_engine(url, connect_args={"check_same_thread": False}, echo=False)
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        echo=False,  # Set True to see SQL queries
    )


# Database engines
engine = create_db_engine(settings.DATABASE_URL)
ledger_engine = create_db_engine(settings.LEDGER_DATABASE_URL)

# Session factories
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

LedgerSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=ledger_engine
)


def init_db(bind=None, ledger_bind=None):
    """Create both schemas. Tables that already exist are left alone."""
    # Models must be imported so their tables are registered on the metadata
    import textile_ledger.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    LedgerBase.metadata.create_all(bind=ledger_bind or ledger_engine)


# FastAPI dependencies
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_ledger_db():
    db = LedgerSessionLocal()
    try:
        yield db
    finally:
        db.close()
