# storefront/repos/product_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductRepo:
    """
    Stock ledger: live reads and conditional decrements of product quantity.
    Catalog fields (price, discount, status) are read only.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def read_available(self, product_id: int) -> int:
        # column select always hits the database, the identity map may be stale
        available = self.db.execute(
            select(ProductModel.quantity).where(ProductModel.id == product_id)
        ).scalar_one_or_none()

        if available is None:
            raise ProductNotFoundError(product_id)
        return available

    def decrement(self, product_id: int, amount: int) -> int:
        """
        UPDATE ... SET quantity = quantity - :amount WHERE quantity >= :amount
        in a single statement, returns the remaining quantity.
        """
        if amount < 1:
            raise InvalidQuantityError(amount)

        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.quantity >= amount)
            .values(quantity=ProductModel.quantity - amount)
            .execution_options(synchronize_session="fetch")
        )

        if result.rowcount == 0:
            # nothing updated: either no such product or not enough stock
            product = self.get_product(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            available = self.read_available(product_id)
            logger.warning(f"Stock decrement of {amount} refused for product {product_id}, available {available}")
            raise InsufficientStockError(
                product_id=product_id,
                requested=amount,
                available=available,
                product_name=product.name,
            )

        remaining = self.read_available(product_id)
        logger.info(f"Product {product_id} stock decremented by {amount}, remaining {remaining}")
        return remaining
