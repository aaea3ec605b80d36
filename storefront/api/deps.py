# storefront/api/deps.py
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.repos.user_repo import UserRepo
from storefront.services.lock_service import LockService

_lock_service: LockService | None = None


def get_lock_service() -> LockService:
    global _lock_service
    if _lock_service is None:
        _lock_service = LockService()
    return _lock_service


def get_current_user(
    x_user_id: int | None = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> UserModel:
    """
    Identity is resolved upstream (gateway / token check) and forwarded in
    X-User-Id. Here we only make sure it points at an active user.
    """
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Not authorized, no user identity")

    user = UserRepo(db).get_active_user(x_user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return user


def require_admin(user: UserModel = Depends(get_current_user)) -> UserModel:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Access denied. Admin role required")
    return user
