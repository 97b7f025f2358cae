import logging

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from fastapi import HTTPException

from evensplit.models.friendship import Friendship, FRIEND_PENDING, FRIEND_ACCEPTED, FRIEND_DECLINED
from evensplit.models.user import User
from evensplit.services.user_service import get_user_by_email

logger = logging.getLogger(__name__)

async def _find_between(db: AsyncSession, a: int, b: int):
    q = select(Friendship).where(
        or_(
            and_(Friendship.user_id == a, Friendship.friend_id == b),
            and_(Friendship.user_id == b, Friendship.friend_id == a),
        )
    )
    res = await db.execute(q)
    return res.scalars().first()

async def send_friend_request(db: AsyncSession, user_id: int, friend_email: str):
    friend = await get_user_by_email(db, friend_email)

    if not friend:
        raise HTTPException(404, "No user with that email address")

    if friend.id == user_id:
        raise HTTPException(400, "You cannot add yourself as a friend")

    existing = await _find_between(db, user_id, friend.id)
    if existing:
        if existing.status == FRIEND_PENDING:
            raise HTTPException(400, "Friend request already sent")
        if existing.status == FRIEND_ACCEPTED:
            raise HTTPException(400, "You are already friends")
        raise HTTPException(400, "Friend request was previously declined")

    friendship = Friendship(user_id=user_id, friend_id=friend.id, status=FRIEND_PENDING)
    db.add(friendship)
    await db.commit()
    await db.refresh(friendship)

    logger.info("user %s sent friend request to %s", user_id, friend.id)
    return friendship

async def list_friend_requests(db: AsyncSession, user_id: int):
    q = (
        select(Friendship)
        .where(Friendship.friend_id == user_id, Friendship.status == FRIEND_PENDING)
        .order_by(Friendship.created_at.desc(), Friendship.id.desc())
    )
    res = await db.execute(q)
    return res.scalars().all()

async def get_friend_ids(db: AsyncSession, user_id: int):
    q = select(Friendship).where(
        Friendship.status == FRIEND_ACCEPTED,
        or_(Friendship.user_id == user_id, Friendship.friend_id == user_id),
    )
    res = await db.execute(q)

    # friendship id keyed by the other side, deduplicated
    friends = {}
    for f in res.scalars().all():
        other = f.friend_id if f.user_id == user_id else f.user_id
        friends.setdefault(other, f.id)
    return friends

async def list_friends(db: AsyncSession, user_id: int):
    friends = await get_friend_ids(db, user_id)
    if not friends:
        return []

    res = await db.execute(select(User).where(User.id.in_(list(friends))).order_by(User.id))
    return [
        {
            "friendship_id": friends[u.id],
            "user_id": u.id,
            "name": u.label,
            "email": u.email
        }
        for u in res.scalars().all()
    ]

async def respond_to_friend_request(db: AsyncSession, friendship_id: int, user_id: int, response: str):
    res = await db.execute(select(Friendship).where(Friendship.id == friendship_id))
    friendship = res.scalar_one_or_none()

    if not friendship:
        raise HTTPException(404, "Friend request not found")

    if friendship.friend_id != user_id:
        raise HTTPException(403, "Only the recipient can respond to a friend request")

    if friendship.status != FRIEND_PENDING:
        raise HTTPException(400, "Friend request was already answered")

    friendship.status = FRIEND_ACCEPTED if response == FRIEND_ACCEPTED else FRIEND_DECLINED
    await db.commit()

    message = "Friend request accepted!" if friendship.status == FRIEND_ACCEPTED else "Friend request declined"
    return {"success": True, "message": message}

async def remove_friend(db: AsyncSession, friendship_id: int, user_id: int):
    res = await db.execute(select(Friendship).where(Friendship.id == friendship_id))
    friendship = res.scalar_one_or_none()

    if not friendship:
        raise HTTPException(404, "Friendship not found")

    if user_id not in (friendship.user_id, friendship.friend_id):
        raise HTTPException(403, "You are not part of this friendship")

    await db.delete(friendship)
    await db.commit()

    logger.info("friendship %s removed by user %s", friendship_id, user_id)
    return {"success": True, "message": "Friend removed successfully"}
