import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from fastapi import HTTPException

from evensplit.core.config import settings
from evensplit.core.dependencies import check_group_admin, check_group_membership, get_membership
from evensplit.core.utils import as_utc
from evensplit.models.group import Group
from evensplit.models.group_invitation import (
    GroupInvitation, INVITE_PENDING, INVITE_ACCEPTED, INVITE_DECLINED, INVITE_EXPIRED,
)
from evensplit.models.group_member import GroupMember, ROLE_ADMIN, ROLE_MEMBER
from evensplit.services.group_services import get_group
from evensplit.services.user_service import get_user_by_email, get_user_by_id

logger = logging.getLogger(__name__)

async def invite_to_group(db: AsyncSession, group_id: int, invited_user_id: int, invited_by: int, message: str | None = None):
    await get_group(db, group_id)
    await check_group_admin(db, group_id, invited_by, "Only group admins can send invitations")

    if not await get_user_by_id(db, invited_user_id):
        raise HTTPException(404, "User does not exist")

    if await get_membership(db, group_id, invited_user_id):
        raise HTTPException(400, "User is already a member of this group")

    res = await db.execute(
        select(GroupInvitation).where(
            GroupInvitation.group_id == group_id,
            GroupInvitation.invited_user_id == invited_user_id,
            GroupInvitation.status == INVITE_PENDING
        )
    )
    if res.scalars().first():
        raise HTTPException(400, "User already has a pending invitation to this group")

    invitation = GroupInvitation(
        group_id=group_id,
        invited_user_id=invited_user_id,
        invited_by_user_id=invited_by,
        message=message,
        status=INVITE_PENDING,
        expires_at=datetime.now(timezone.utc) + timedelta(days=settings.INVITATION_EXPIRY_DAYS)
    )
    db.add(invitation)
    await db.commit()
    await db.refresh(invitation)

    logger.info("user %s invited %s to group %s", invited_by, invited_user_id, group_id)
    return invitation

async def invite_by_email(db: AsyncSession, group_id: int, email: str, invited_by: int, message: str | None = None):
    user = await get_user_by_email(db, email)

    if not user:
        raise HTTPException(404, "User with that email address not found.")

    return await invite_to_group(db, group_id, user.id, invited_by, message)

async def list_user_invitations(db: AsyncSession, user_id: int):
    q = (
        select(GroupInvitation, Group.name)
        .join(Group, Group.id == GroupInvitation.group_id)
        .where(
            GroupInvitation.invited_user_id == user_id,
            GroupInvitation.status == INVITE_PENDING
        )
        .order_by(GroupInvitation.created_at.desc(), GroupInvitation.id.desc())
    )
    res = await db.execute(q)

    return [
        {
            "id": inv.id,
            "group_id": inv.group_id,
            "group_name": group_name,
            "invited_user_id": inv.invited_user_id,
            "invited_by_user_id": inv.invited_by_user_id,
            "message": inv.message,
            "status": inv.status,
            "created_at": inv.created_at,
            "expires_at": inv.expires_at,
            "responded_at": inv.responded_at
        }
        for inv, group_name in res.all()
    ]

async def list_group_invitations(db: AsyncSession, group_id: int, user_id: int):
    await check_group_membership(db, group_id, user_id)

    res = await db.execute(
        select(GroupInvitation)
        .where(GroupInvitation.group_id == group_id)
        .order_by(GroupInvitation.created_at.desc(), GroupInvitation.id.desc())
    )
    return res.scalars().all()

async def respond_to_invitation(db: AsyncSession, invitation_id: int, user_id: int, response: str):
    res = await db.execute(
        select(GroupInvitation).where(
            GroupInvitation.id == invitation_id,
            GroupInvitation.invited_user_id == user_id,
            GroupInvitation.status == INVITE_PENDING
        )
    )
    invitation = res.scalar_one_or_none()

    if not invitation:
        raise HTTPException(404, "Invitation not found or already responded to")

    now = datetime.now(timezone.utc)

    if invitation.expires_at and now > as_utc(invitation.expires_at):
        invitation.status = INVITE_EXPIRED
        invitation.responded_at = now
        await db.commit()
        logger.warning("invitation %s answered after expiry", invitation_id)
        raise HTTPException(400, "This invitation has expired")

    invitation.status = INVITE_ACCEPTED if response == INVITE_ACCEPTED else INVITE_DECLINED
    invitation.responded_at = now

    if invitation.status == INVITE_ACCEPTED and not await get_membership(db, invitation.group_id, user_id):
        db.add(GroupMember(group_id=invitation.group_id, user_id=user_id, role=ROLE_MEMBER))

    await db.commit()

    if invitation.status == INVITE_ACCEPTED:
        return {"success": True, "message": "Invitation accepted! You've joined the group."}
    return {"success": True, "message": "Invitation declined."}

async def cancel_invitation(db: AsyncSession, invitation_id: int, user_id: int):
    res = await db.execute(select(GroupInvitation).where(GroupInvitation.id == invitation_id))
    invitation = res.scalar_one_or_none()

    if not invitation:
        raise HTTPException(404, "Invitation not found")

    membership = await get_membership(db, invitation.group_id, user_id)
    is_admin = membership is not None and membership.role == ROLE_ADMIN

    if not is_admin and invitation.invited_by_user_id != user_id:
        raise HTTPException(403, "Only group admins or the invitation sender can cancel invitations")

    await db.delete(invitation)
    await db.commit()
    return {"success": True, "message": "Invitation cancelled successfully"}
