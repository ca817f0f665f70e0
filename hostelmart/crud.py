"""
Persistence operations over the ORM models.

SQLAlchemy errors stop here: they are logged with context and re-raised as
StoreError (500), or ConflictError (409) when a unique constraint fires.
Uniqueness of email and hostel name is the database's job; the
look-before-insert checks in the routers only give a friendlier message
in the common case.
"""

import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from hostelmart.exceptions import ConflictError, NotFoundError, StoreError
from hostelmart.models import Hostel, Product, User

logger = logging.getLogger(__name__)

ALL_HOSTELS = "All Hostels"
ALL_CATEGORIES = "all"


def _commit(db: Session, action: str, conflict_message: Optional[str] = None) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if conflict_message is None:
            logger.error(f"Integrity error while trying to {action}: {e.orig}")
            raise StoreError() from e
        logger.info(f"Conflict while trying to {action}")
        raise ConflictError(conflict_message) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while trying to {action}: {e}")
        raise StoreError() from e


def _query_error(action: str, e: SQLAlchemyError) -> StoreError:
    logger.error(f"Database error while trying to {action}: {e}")
    return StoreError()


# ============================================
# Accounts
# ============================================

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    try:
        return db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as e:
        raise _query_error("look up account by email", e) from e


def get_user(db: Session, user_id: str) -> Optional[User]:
    try:
        return db.get(User, user_id)
    except SQLAlchemyError as e:
        raise _query_error(f"load account {user_id}", e) from e


def create_user(db: Session, **fields: Any) -> User:
    user = User(**fields)
    db.add(user)
    _commit(db, "create account", conflict_message="User already exists")
    db.refresh(user)
    return user


def update_user(db: Session, user_id: str, fields: Dict[str, Any]) -> User:
    user = get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    for key, value in fields.items():
        setattr(user, key, value)
    _commit(db, f"update account {user_id}")
    db.refresh(user)
    return user


# ============================================
# Products
# ============================================

def list_products(
    db: Session,
    hostel: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = "recent",
) -> List[Product]:
    """
    Browse listings.

    "All Hostels" and "all" are the unfiltered choices of the browse form.
    search matches name or description, case-insensitively.
    """
    query = db.query(Product)

    if hostel and hostel != ALL_HOSTELS:
        query = query.filter(Product.hostel == hostel)

    if category and category != ALL_CATEGORIES:
        query = query.filter(Product.category == category)

    if search:
        # autoescape keeps % and _ in the search text literal
        query = query.filter(or_(
            Product.name.icontains(search, autoescape=True),
            Product.description.icontains(search, autoescape=True),
        ))

    if sort_by == "price-low":
        query = query.order_by(Product.price.asc())
    elif sort_by == "price-high":
        query = query.order_by(Product.price.desc())
    else:
        query = query.order_by(Product.created_at.desc())

    try:
        return query.all()
    except SQLAlchemyError as e:
        raise _query_error("list products", e) from e


def list_products_by_seller(db: Session, seller_id: str) -> List[Product]:
    try:
        return (
            db.query(Product)
            .filter(Product.seller_id == seller_id)
            .order_by(Product.created_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise _query_error(f"list products of seller {seller_id}", e) from e


def get_product(db: Session, product_id: str) -> Optional[Product]:
    try:
        return db.get(Product, product_id)
    except SQLAlchemyError as e:
        raise _query_error(f"load product {product_id}", e) from e


def create_product(db: Session, seller_id: str, **fields: Any) -> Product:
    product = Product(seller_id=seller_id, **fields)
    db.add(product)
    _commit(db, "create product")
    db.refresh(product)
    return product


def update_product(db: Session, product: Product, fields: Dict[str, Any]) -> Product:
    for key, value in fields.items():
        setattr(product, key, value)
    _commit(db, f"update product {product.id}")
    db.refresh(product)
    return product


def delete_product(db: Session, product: Product) -> None:
    db.delete(product)
    _commit(db, f"delete product {product.id}")


# ============================================
# Hostels
# ============================================

def list_hostels(db: Session) -> List[Hostel]:
    try:
        return db.query(Hostel).order_by(Hostel.name.asc()).all()
    except SQLAlchemyError as e:
        raise _query_error("list hostels", e) from e


def get_hostel_by_name(db: Session, name: str) -> Optional[Hostel]:
    try:
        return db.query(Hostel).filter(Hostel.name == name).first()
    except SQLAlchemyError as e:
        raise _query_error("look up hostel by name", e) from e


def create_hostel(db: Session, name: str) -> Hostel:
    hostel = Hostel(name=name)
    db.add(hostel)
    _commit(db, "create hostel", conflict_message="Hostel already exists")
    db.refresh(hostel)
    return hostel
