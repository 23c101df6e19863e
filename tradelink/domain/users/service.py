"""User service - Business logic for realtor and contractor profiles"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User
from ...shared.validators import validate_role
from ..scheduling.service import SchedulingService
from .repository import UserRepository
from .schemas import UserCreate

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def get_users(self, role: Optional[str] = None) -> list[User]:
        if role:
            try:
                role = validate_role(role)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e)) from None
        return self.repo.get_users(self.db, role)

    def get_user(self, user_id: str) -> User:
        user = self.repo.get_user_by_id(self.db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    def create_user(self, data: UserCreate) -> User:
        """Create a user; contractors start with the default availability"""
        logger.info(f"📥 Creating {data.role} profile for {data.email}")

        if self.repo.get_user_by_email(self.db, data.email):
            logger.warning(f"⚠️ Email already registered: {data.email}")
            raise HTTPException(status_code=409, detail="Email already registered")

        user = self.repo.create_user(
            self.db,
            name=data.name,
            email=data.email,
            role=data.role,
            company=data.company,
            specialty=data.specialty if data.role == "contractor" else None,
        )

        if user.role == "contractor":
            SchedulingService(self.db).ensure_availability(user)

        logger.info(f"✅ Created {user.role} {user.id}")
        return user
