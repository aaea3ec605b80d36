from sqlalchemy import Boolean, Column, Integer, String
from storefront.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=True)
    role = Column(String, nullable=False, default="customer")  # customer, admin
    is_active = Column(Boolean, nullable=False, default=True)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
