from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from hostelmart import crud
from hostelmart.database import get_db
from hostelmart.dependencies import get_current_user
from hostelmart.exceptions import NotFoundError
from hostelmart.schemas import ProductResponse, ProfileUpdate, TokenClaims, UserResponse

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/profile", response_model=UserResponse)
def get_profile(
    user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    account = crud.get_user(db, user.id)
    if not account:
        # Token outlived its account
        raise NotFoundError("User not found")
    return account


@router.put("/profile", response_model=UserResponse)
def update_profile(
    request: ProfileUpdate,
    user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update hostel, room number and WhatsApp number.

    Fields left out of the body keep their current value. Name and email
    cannot be changed.
    """
    fields = request.model_dump(exclude_unset=True, exclude_none=True)
    return crud.update_user(db, user.id, fields)


@router.get("/products", response_model=List[ProductResponse])
def my_products(
    user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Current account's listings, newest first."""
    return crud.list_products_by_seller(db, user.id)
