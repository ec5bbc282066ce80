from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from textile_ledger.database import get_db
from textile_ledger.services import khata_service
from textile_ledger.schemas.khata import KhataCreateRequest, KhataListResponse, KhataResponse

router = APIRouter()

@router.get("", response_model=KhataListResponse)
def list_khatas(db: Session = Depends(get_db)):
    """
    List khatas (account books).
    A "Main Account Book" khata is created the first time the list is empty.
    """
    return KhataListResponse(khatas=[KhataResponse.model_validate(k) for k in khata_service.list_khatas(db)])


@router.post("", response_model=KhataResponse, status_code=status.HTTP_201_CREATED)
def create_khata(request: KhataCreateRequest, db: Session = Depends(get_db)):
    return khata_service.create_khata(db, request)


@router.get("/{khata_id}", response_model=KhataResponse)
def get_khata(khata_id: int, db: Session = Depends(get_db)):
    return khata_service.get_khata(db, khata_id)
