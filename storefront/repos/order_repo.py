# storefront/repos/order_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def order_number_exists(self, order_number: str) -> bool:
        return self.db.execute(
            select(OrderModel.id).where(OrderModel.order_number == order_number)
        ).first() is not None

    def list_by_user(self, user_id: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def list_orders(self, offset: int, limit: int, status: str | None = None) -> tuple[list[OrderModel], int]:
        query = select(OrderModel)
        count_query = select(func.count(OrderModel.id))
        if status:
            query = query.where(OrderModel.status == status)
            count_query = count_query.where(OrderModel.status == status)

        orders = self.db.execute(
            query.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()
        total = self.db.execute(count_query).scalar_one()
        return list(orders), total

    def commit(self):
        self.db.commit()
