from sqlalchemy import func
from sqlalchemy.orm import Session

from rentify.db.models.user import User as UserModel


def get_user_by_email(db: Session, email: str) -> UserModel | None:
    """Case-insensitive lookup; emails are stored lowercased."""
    return db.query(UserModel).filter(func.lower(UserModel.email) == email.lower()).first()


def get_user_by_id(db: Session, user_id: int) -> UserModel | None:
    return db.get(UserModel, user_id)


def create_user(db: Session, **fields) -> UserModel:
    """Insert a user row. ``fields`` are model columns; the email is lowercased."""
    user = UserModel(**fields)
    user.email = user.email.lower()
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
