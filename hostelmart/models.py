from sqlalchemy import Column, String, Text, Float, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from hostelmart.database import Base
import uuid

WHATSAPP_URL = "https://wa.me/"


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    Marketplace account. Stores credentials and hostel contact details.

    Design notes:
    - email is unique and indexed for fast lookup
    - password_hash never leaves the database layer
    - hostel, room_number and whatsapp_number are the only fields a
      profile update may change
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)

    hostel = Column(String(255), nullable=False)
    room_number = Column(String(50), nullable=False)
    whatsapp_number = Column(String(32), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    products = relationship("Product", back_populates="seller")

    @property
    def whatsapp_link(self) -> str:
        return f"{WHATSAPP_URL}{self.whatsapp_number}"

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class Product(Base):
    """
    Secondhand item listed by a seller.

    hostel and room_number are copied onto the listing at creation, so a
    listing keeps its pickup location when the seller later moves rooms.
    """
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    images = Column(JSON, nullable=False, default=list)
    hostel = Column(String(255), nullable=False, index=True)
    room_number = Column(String(50), nullable=False)

    seller_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    seller = relationship("User", back_populates="products", lazy="joined")

    # Seller dashboard lists a seller's items newest first
    __table_args__ = (
        Index('ix_product_seller_created', 'seller_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, seller_id={self.seller_id})>"


class Hostel(Base):
    __tablename__ = "hostels"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Hostel(id={self.id}, name={self.name})>"
