from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple

from textile_ledger.models.accounting import Khata, Party

def create_khata(db: Session, name: str, description: Optional[str] = None) -> Khata:
    """Create a khata (account book) in the ledger schema."""
    khata = Khata(name=name, description=description)
    db.add(khata)
    db.commit()
    db.refresh(khata)
    return khata


def get_khata_by_id(db: Session, khata_id: int) -> Optional[Khata]:
    return db.query(Khata).filter(Khata.id == khata_id).first()


def list_khatas(db: Session) -> List[Khata]:
    return db.query(Khata).order_by(Khata.name.asc()).all()


def create_party(db: Session, **fields) -> Party:
    """
    Create a party (vendor, customer...) under a khata.

    Example: register "Ali Thread House" as a VENDOR in khata 1
    """
    party = Party(**fields)
    db.add(party)
    db.commit()
    db.refresh(party)
    return party


def get_party_by_id(db: Session, party_id: int) -> Optional[Party]:
    return db.query(Party).filter(Party.id == party_id).first()


def list_parties(
    db: Session,
    khata_id: Optional[int] = None,
    party_type: Optional[str] = None,
    search: Optional[str] = None,
    offset: int = 0,
    limit: int = 50
) -> Tuple[List[Party], int]:
    query = db.query(Party)

    if khata_id is not None:
        query = query.filter(Party.khata_id == khata_id)
    if party_type:
        query = query.filter(Party.type == party_type)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(or_(
            Party.name.ilike(term),
            Party.contact.ilike(term),
            Party.phone_number.ilike(term),
            Party.address.ilike(term)
        ))

    total = query.count()
    parties = query.order_by(Party.name.asc()).offset(offset).limit(limit).all()
    return parties, total
