from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from hostelmart import crud
from hostelmart.database import get_db
from hostelmart.dependencies import get_current_user
from hostelmart.exceptions import ConflictError
from hostelmart.schemas import HostelCreate, HostelResponse, TokenClaims

router = APIRouter(prefix="/api/hostels", tags=["hostels"])


@router.get("", response_model=List[HostelResponse])
def list_hostels(db: Session = Depends(get_db)):
    """All hostels, alphabetical. Public: the registration form needs it."""
    return crud.list_hostels(db)


@router.post("", response_model=HostelResponse)
def create_hostel(
    request: HostelCreate,
    user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Any signed-in account may add a missing hostel. 409 on duplicates."""
    if crud.get_hostel_by_name(db, request.name):
        raise ConflictError("Hostel already exists")
    return crud.create_hostel(db, request.name)
