from sqlalchemy.orm import Session
from typing import Optional, List

from app.models.user import User
from app.schemas.user import UserCreate

def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

def create_user(db: Session, *, obj_in: UserCreate) -> User:
    db_obj = User(**obj_in.model_dump())
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj

def get_users(
    db: Session, *, include_admins: bool = True, is_active: Optional[bool] = None, skip: int = 0, limit: Optional[int] = None
) -> List[User]:
    query = db.query(User)
    if not include_admins:
        query = query.filter(User.is_superuser == False) # noqa: E712
    if is_active is not None:
        query = query.filter(User.is_active == is_active)
    query = query.order_by(User.id).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()
