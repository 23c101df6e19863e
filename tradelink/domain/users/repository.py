"""User repository - Database operations for realtor and contractor profiles"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import User


class UserRepository:
    """Repository for user database operations"""

    @staticmethod
    def get_users(db: Session, role: Optional[str] = None) -> list[User]:
        """Get all users, optionally filtered by role"""
        query = db.query(User)

        if role:
            query = query.filter(User.role == role)

        return query.order_by(User.created_at.desc(), User.name).all()

    @staticmethod
    def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def create_user(db: Session, **user_data) -> User:
        user = User(**user_data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
