"""
Table definitions.

Repositories talk to these tables with plain SQL; the declarative classes
exist so ``flask init-db`` (and the tests) can create the schema with
``Base.metadata.create_all``.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


class UserProfile(Base):
    """
    A registered account.

    role is one of customer / b2b / admin. A b2b profile only gets
    wholesale pricing once is_approved has been flipped by an admin.
    """

    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(Text, nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    full_name = Column(Text, nullable=True)
    role = Column(Text, nullable=False, default="customer")
    is_approved = Column(Boolean, nullable=False, default=False)
    company_name = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        CheckConstraint("role IN ('customer', 'b2b', 'admin')", name="ck_user_profile_role"),
    )

    def __repr__(self) -> str:
        return f"<UserProfile id={self.id} email={self.email!r} role={self.role}>"


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    description = Column(Text, nullable=False, default="")
    image_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    products = relationship("Product", back_populates="category")

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r}>"


class Product(Base):
    """
    A catalog item with a retail and a wholesale price, both in cents.

    min_quantity_b2b applies to approved resellers only.
    """

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    b2c_price_cents = Column(Integer, nullable=False)
    b2b_price_cents = Column(Integer, nullable=False)
    min_quantity_b2b = Column(Integer, nullable=False, default=1)
    in_stock = Column(Boolean, nullable=False, default=True)
    image_url = Column(Text, nullable=True)
    sku = Column(Text, nullable=True)
    material = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        CheckConstraint("b2c_price_cents >= 0", name="ck_product_b2c_price"),
        CheckConstraint("b2b_price_cents >= 0", name="ck_product_b2b_price"),
        CheckConstraint("min_quantity_b2b >= 1", name="ck_product_min_quantity"),
    )

    category = relationship("Category", back_populates="products")

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"


class ResellerApplication(Base):
    __tablename__ = "reseller_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True)
    company_name = Column(Text, nullable=False)
    contact_person = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    business_address = Column(Text, nullable=False)
    city = Column(Text, nullable=True)
    state = Column(Text, nullable=True)
    zip_code = Column(Text, nullable=True)
    business_type = Column(Text, nullable=False)
    years_in_business = Column(Text, nullable=False)
    tax_id = Column(Text, nullable=True)
    website = Column(Text, nullable=True)
    expected_monthly_volume = Column(Text, nullable=True)
    business_description = Column(Text, nullable=True)
    trade_references = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="pending")
    reviewed_by = Column(Integer, ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="ck_application_status"
        ),
    )


class Order(Base):
    """
    An order recorded at checkout time.

    Payment happens out of band after the WhatsApp hand-off; status is only
    ever changed by an admin.
    """

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_number = Column(Text, nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True)
    customer_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    city = Column(Text, nullable=False)
    state = Column(Text, nullable=False)
    zip_code = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    channel = Column(Text, nullable=False, default="b2c")
    company_name = Column(Text, nullable=True)
    total_cents = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("total_cents >= 0", name="ck_order_total"),
        CheckConstraint("channel IN ('b2c', 'b2b')", name="ck_order_channel"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    # Products can be deleted later; the denormalized name/sku keep the order readable
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    product_name = Column(Text, nullable=False)
    sku = Column(Text, nullable=True)
    unit_price_cents = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)
    line_total_cents = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_item_quantity"),
    )

    order = relationship("Order", back_populates="items")
