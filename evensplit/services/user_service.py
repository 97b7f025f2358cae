import logging
from typing import Dict, Iterable

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from evensplit.models.user import User
from evensplit.schemas.user import UserCreate
from evensplit.core.security import hash_password
from fastapi import HTTPException

logger = logging.getLogger(__name__)

async def get_user_by_email(db: AsyncSession, email:str):
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()

async def get_user_by_id(db: AsyncSession, id:int):
    result = await db.execute(select(User).where(User.id == id))
    return result.scalar_one_or_none()

async def get_all_users(db: AsyncSession):
    result = await db.execute(select(User).order_by(User.id))
    return result.scalars().all()

async def get_users_by_ids(db: AsyncSession, user_ids: Iterable[int]) -> Dict[int, User]:
    ids = set(user_ids)
    if not ids:
        return {}
    res = await db.execute(select(User).where(User.id.in_(ids)))
    return {u.id: u for u in res.scalars().all()}

async def get_display_names(db: AsyncSession, user_ids: Iterable[int]) -> Dict[int, str]:
    users = await get_users_by_ids(db, user_ids)
    return {uid: u.label for uid, u in users.items()}

async def create_user(db: AsyncSession, data: UserCreate):
    existing = await get_user_by_email(db, data.email)
    if existing:
        raise ValueError("User already Exists")

    user = User(
        email = data.email.lower(),
        name = data.name.strip(),
        password_hash = hash_password(data.password)
    )

    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("registered user %s", user.id)
    return user

async def update_display_name(db: AsyncSession, user_id: int, display_name: str):
    user = await get_user_by_id(db, user_id)

    if not user:
        raise HTTPException(404, "User does not exist")

    user.display_name = display_name

    await db.commit()
    await db.refresh(user)

    return user
