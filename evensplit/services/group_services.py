import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, func
from fastapi import HTTPException

from evensplit.core.dependencies import check_group_admin, check_group_membership, get_membership
from evensplit.models.expense import Expense
from evensplit.models.group import Group
from evensplit.models.group_member import GroupMember, ROLE_ADMIN, ROLE_MEMBER
from evensplit.models.user import User
from evensplit.services.friend_services import get_friend_ids

logger = logging.getLogger(__name__)

async def get_group(db: AsyncSession, group_id: int):
    res = await db.execute(select(Group).where(Group.id == group_id))
    group = res.scalar_one_or_none()

    if not group:
        raise HTTPException(404, "Group not found")
    return group

async def create_group(db: AsyncSession, name: str, creator_id: int, description: str | None = None):
    group = Group(name=name, description=description, created_by=creator_id)
    db.add(group)
    await db.flush()

    member = GroupMember(group_id=group.id, user_id=creator_id, role=ROLE_ADMIN)
    db.add(member)

    await db.commit()
    await db.refresh(group)

    logger.info("group %s created by user %s", group.id, creator_id)
    return group

async def list_group_for_user(db: AsyncSession, user_id: int):
    q = (
        select(Group, GroupMember.role, GroupMember.joined_at)
        .join(GroupMember, GroupMember.group_id == Group.id)
        .where(GroupMember.user_id == user_id)
        .order_by(Group.created_at, Group.id)
    )
    res = await db.execute(q)

    return [
        {
            "id": g.id,
            "uuid": g.uuid,
            "name": g.name,
            "description": g.description,
            "created_by": g.created_by,
            "created_at": g.created_at,
            "role": role,
            "joined_at": joined_at
        }
        for g, role, joined_at in res.all()
    ]

async def get_group_by_uuid(db: AsyncSession, group_uuid: UUID, user_id: int):
    res = await db.execute(select(Group).where(Group.uuid == group_uuid))
    group = res.scalar_one_or_none()

    if not group:
        raise HTTPException(404, "Group not found")

    await check_group_membership(db, group.id, user_id)
    return group

async def list_group_members(db: AsyncSession, group_id: int):
    q = (
        select(GroupMember, User.name, User.display_name, User.email)
        .join(User, User.id == GroupMember.user_id)
        .where(GroupMember.group_id == group_id)
        .order_by(GroupMember.joined_at, GroupMember.id)
    )
    res = await db.execute(q)

    return [
        {
            "id": m.id,
            "group_id": m.group_id,
            "user_id": m.user_id,
            "role": m.role,
            "joined_at": m.joined_at,
            "name": display_name or name,
            "email": email
        }
        for m, name, display_name, email in res.all()
    ]

async def get_member_ids(db: AsyncSession, group_id: int):
    res = await db.execute(
        select(GroupMember.user_id)
        .where(GroupMember.group_id == group_id)
        .order_by(GroupMember.joined_at, GroupMember.id)
    )
    return list(res.scalars().all())

async def get_group_details(db: AsyncSession, group_id: int, user_id: int):
    group = await get_group(db, group_id)
    await check_group_membership(db, group_id, user_id)

    members = await list_group_members(db, group_id)
    return {"group": group, "members": members}

async def edit_group(db: AsyncSession, group_id: int, user_id: int, data):
    group = await get_group(db, group_id)
    await check_group_admin(db, group_id, user_id, "Only group admins can update group details")

    if data.name is not None:
        group.name = data.name
    if data.description is not None:
        group.description = data.description

    await db.commit()
    await db.refresh(group)
    return group

async def delete_group(db: AsyncSession, group_id: int, user_id: int):
    group = await get_group(db, group_id)

    membership = await get_membership(db, group_id, user_id)
    is_admin = membership is not None and membership.role == ROLE_ADMIN

    if not is_admin and group.created_by != user_id:
        raise HTTPException(403, "Only group creator or admins can delete the group")

    # expenses cascade to splits, payments, history and comments through the ORM
    res = await db.execute(select(Expense).where(Expense.group_id == group_id))
    for expense in res.scalars().all():
        await db.delete(expense)

    await db.delete(group)
    await db.commit()

    logger.info("group %s deleted by user %s", group_id, user_id)
    return {"success": True, "message": "Group deleted successfully!"}

async def add_member(db: AsyncSession, group_id: int, member_user_id: int, user_id: int, role: str = ROLE_MEMBER):
    await get_group(db, group_id)
    await check_group_admin(db, group_id, user_id, "Only group admins can add members")

    res = await db.execute(select(User).where(User.id == member_user_id))
    if not res.scalar_one_or_none():
        raise HTTPException(404, "User does not exist")

    if await get_membership(db, group_id, member_user_id):
        raise HTTPException(400, "User is already a member of this group")

    new_member = GroupMember(group_id=group_id, user_id=member_user_id, role=role)
    db.add(new_member)
    await db.commit()
    await db.refresh(new_member)
    return new_member

async def remove_member(db: AsyncSession, group_id: int, member_user_id: int, user_id: int):
    #TODO: block removal while the member still has an open balance in the group
    await get_group(db, group_id)

    membership = await get_membership(db, group_id, user_id)
    is_admin = membership is not None and membership.role == ROLE_ADMIN
    is_self_removal = member_user_id == user_id

    if not is_admin and not is_self_removal:
        raise HTTPException(403, "Only admins can remove members, or members can remove themselves")

    member = await get_membership(db, group_id, member_user_id)
    if not member:
        raise HTTPException(404, "User is not a member of this group")

    await db.execute(
        delete(GroupMember).where(
            GroupMember.group_id == group_id,
            GroupMember.user_id == member_user_id
        )
    )
    await db.commit()

    logger.info("user %s removed from group %s by %s", member_user_id, group_id, user_id)
    message = "Left group successfully!" if is_self_removal else "Member removed successfully!"
    return {"success": True, "message": message}

async def promote_to_admin(db: AsyncSession, group_id: int, member_user_id: int, user_id: int):
    await check_group_admin(db, group_id, user_id, "Only group admins can promote members")

    member = await get_membership(db, group_id, member_user_id)
    if not member:
        raise HTTPException(404, "Member not found in this group")

    if member.role == ROLE_ADMIN:
        raise HTTPException(400, "Member is already an admin")

    member.role = ROLE_ADMIN
    await db.commit()
    return {"success": True, "message": "Member promoted to admin successfully!"}

async def demote_from_admin(db: AsyncSession, group_id: int, member_user_id: int, user_id: int):
    await check_group_admin(db, group_id, user_id, "Only group admins can demote members")

    member = await get_membership(db, group_id, member_user_id)
    if not member:
        raise HTTPException(404, "Member not found in this group")

    if member.role != ROLE_ADMIN:
        raise HTTPException(400, "Member is not an admin")

    admin_count = await db.scalar(
        select(func.count(GroupMember.id)).where(
            GroupMember.group_id == group_id,
            GroupMember.role == ROLE_ADMIN
        )
    )

    if admin_count == 1 and member_user_id == user_id:
        raise HTTPException(400, "Cannot demote yourself as the only admin")

    member.role = ROLE_MEMBER
    await db.commit()
    return {"success": True, "message": "Admin demoted to member successfully!"}

async def list_friends_not_in_group(db: AsyncSession, group_id: int, user_id: int):
    await check_group_membership(db, group_id, user_id)

    friends = await get_friend_ids(db, user_id)
    if not friends:
        return []

    member_ids = set(await get_member_ids(db, group_id))
    candidates = [fid for fid in friends if fid not in member_ids]
    if not candidates:
        return []

    res = await db.execute(select(User).where(User.id.in_(candidates)).order_by(User.id))
    return [
        {"user_id": u.id, "name": u.label, "email": u.email}
        for u in res.scalars().all()
    ]
