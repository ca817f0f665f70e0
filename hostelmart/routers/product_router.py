import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from hostelmart import crud
from hostelmart.database import get_db
from hostelmart.dependencies import get_current_user
from hostelmart.exceptions import AuthorizationError, NotFoundError
from hostelmart.models import Product
from hostelmart.schemas import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    SuccessResponse,
    TokenClaims,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])


def _owned_product(db: Session, product_id: str, user: TokenClaims) -> Product:
    """Load a product the current account is allowed to change."""
    product = crud.get_product(db, product_id)
    if not product:
        raise NotFoundError("Product not found")
    if product.seller_id != user.id:
        logger.info(f"Account {user.id} denied access to product {product_id}")
        raise AuthorizationError("Unauthorized")
    return product


@router.get("", response_model=List[ProductResponse])
def list_products(
    hostel: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = Query("recent", alias="sortBy"),
    db: Session = Depends(get_db)
):
    """
    Browse listings.

    Query parameters:
    - hostel: exact hostel name, "All Hostels" for any
    - category: category key, "all" for any
    - search: case-insensitive match on name or description
    - sortBy: recent (default), price-low, price-high
    """
    return crud.list_products(db, hostel=hostel, category=category, search=search, sort_by=sort_by)


@router.post("", response_model=ProductResponse)
def create_product(
    request: ProductCreate,
    user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    product = crud.create_product(db, seller_id=user.id, **request.model_dump())
    logger.info(f"Account {user.id} listed product {product.id}")
    return product


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, db: Session = Depends(get_db)):
    product = crud.get_product(db, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    request: ProductUpdate,
    user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Seller-only update. 404 if missing, 403 if someone else's."""
    product = _owned_product(db, product_id, user)
    fields = request.model_dump(exclude_unset=True, exclude_none=True)
    return crud.update_product(db, product, fields)


@router.delete("/{product_id}", response_model=SuccessResponse)
def delete_product(
    product_id: str,
    user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    product = _owned_product(db, product_id, user)
    crud.delete_product(db, product)
    logger.info(f"Account {user.id} deleted product {product_id}")
    return SuccessResponse()
