from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String

from storefront.data.database import Base

PRODUCT_ACTIVE = "active"
PRODUCT_INACTIVE = "inactive"
PRODUCT_OUT_OF_STOCK = "out_of_stock"
PRODUCT_STATUSES = (PRODUCT_ACTIVE, PRODUCT_INACTIVE, PRODUCT_OUT_OF_STOCK)


class ProductModel(Base):
    """Catalog row; this service only snapshots price/discount and moves quantity."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)

    price = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(5, 2), nullable=False, default=0)
    quantity = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default=PRODUCT_ACTIVE)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        CheckConstraint("discount >= 0 AND discount <= 100", name="ck_products_discount_range"),
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in PRODUCT_STATUSES) + ")",
            name="ck_products_status",
        ),
    )
