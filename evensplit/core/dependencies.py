import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from evensplit.db.session import get_db
from evensplit.core.jwt_config import decode_token, get_token_from_cookie
from evensplit.core.security import verify_password
from evensplit.models.group_member import GroupMember, ROLE_ADMIN
from evensplit.services.user_service import get_user_by_id, get_user_by_email

logger = logging.getLogger(__name__)

async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)):
    try:
        token = get_token_from_cookie(request=request)
        payload = decode_token(token)
        user_id = payload.get("sub")

        if user_id is None:
            raise HTTPException(status_code=401, detail="Invalid authentication credentials")

        user = await get_user_by_id(db, int(user_id))

        if user is None:
            raise HTTPException(status_code=401, detail="User not found")

        return user
    except HTTPException:
        raise
    except (TypeError, ValueError) as e:
        logger.warning("rejected malformed token subject: %s", e)
        raise HTTPException(status_code=401, detail="Could not validate credentials")

async def authenticate_user(db:AsyncSession, email:str, password:str):
    user = await get_user_by_email(db, email)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user

async def get_membership(db: AsyncSession, group_id: int, user_id: int):
    res = await db.execute(
        select(GroupMember).where(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id
        )
    )
    return res.scalar_one_or_none()

async def check_group_membership(db: AsyncSession, group_id: int, user_id: int):
    member = await get_membership(db, group_id, user_id)
    if not member:
        raise HTTPException(status_code=403, detail="You are not a member of this group")
    return member

async def check_group_admin(db: AsyncSession, group_id: int, user_id: int, detail: str = "Only group admins can do this"):
    member = await get_membership(db, group_id, user_id)
    if not member or member.role != ROLE_ADMIN:
        raise HTTPException(status_code=403, detail=detail)
    return member
