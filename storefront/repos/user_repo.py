from sqlalchemy.orm import Session
from storefront.data.models.user import UserModel

class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_active_user(self, user_id: int) -> UserModel | None:
        user = self.get_user(user_id)
        if user is None or not user.is_active:
            return None
        return user
