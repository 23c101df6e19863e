"""User router - FastAPI endpoints for realtor and contractor profiles"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import UserCreate, UserResponse
from .service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


@router.get("", response_model=list[UserResponse])
async def get_users(
    role: Optional[str] = Query(None, description="realtor or contractor"),
    service: UserService = Depends(get_user_service),
):
    """List users, optionally only realtors or only contractors"""
    return service.get_users(role)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return service.get_user(user_id)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(data: UserCreate, service: UserService = Depends(get_user_service)):
    """Register a realtor or contractor"""
    return service.create_user(data)
