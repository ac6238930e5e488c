# catalog_service/models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .database import Base


def utcnow():
    # naive UTC, SQLite drops tzinfo on the way back anyway
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_id():
    return uuid.uuid4().hex


# --- Database Model: User ---
class User(Base):
    __tablename__ = "users"
    id = Column(String(32), primary_key=True, default=_new_id)
    email_or_phone = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    role = Column(String, default="user", nullable=False)
    password_hash = Column(String, nullable=True)
    otp = Column(String, nullable=True)
    otp_expires = Column(DateTime, nullable=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} email_or_phone={self.email_or_phone!r}>"


# --- Database Model: Product ---
class Product(Base):
    __tablename__ = "products"
    id = Column(String(32), primary_key=True, default=_new_id)
    product_name = Column(String, nullable=False)
    product_type = Column(String, nullable=False)
    quantity_stock = Column(Integer, nullable=False, default=0)
    mrp = Column(Float, nullable=False, default=0)
    selling_price = Column(Float, nullable=False, default=0)
    brand_name = Column(String, nullable=False)
    images = Column(JSON, nullable=False, default=list)
    exchange_eligibility = Column(String, nullable=False, default="No")
    is_published = Column(Boolean, nullable=False, default=False)
    created_by = Column(String(32), ForeignKey("users.id"), index=True, nullable=False)
    owner = relationship("User", lazy="joined")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.product_name!r} owner={self.created_by}>"
