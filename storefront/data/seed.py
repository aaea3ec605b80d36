# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal, init_db
from storefront.data.models import ProductModel, UserModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

USERS = [
    {"id": 1, "name": "Demo Customer", "email": "customer@example.com", "role": "customer"},
    {"id": 2, "name": "Store Admin", "email": "admin@example.com", "role": "admin"},
]

PRODUCTS = [
    {"name": "Keyboard", "price": Decimal("199.99"), "discount": Decimal("0"), "quantity": 25},
    {"name": "Mouse", "price": Decimal("49.50"), "discount": Decimal("10"), "quantity": 40},
    {"name": "Monitor", "price": Decimal("899.00"), "discount": Decimal("5"), "quantity": 8},
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(UserModel).first() or db.query(ProductModel).first():
            logger.info("Database already seeded")
            return

        db.add_all(UserModel(**u) for u in USERS)
        db.add_all(ProductModel(**p) for p in PRODUCTS)
        db.commit()
        logger.info(f"Seeded {len(USERS)} users and {len(PRODUCTS)} products")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
