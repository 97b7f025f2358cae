from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from evensplit.db.session import get_db
from evensplit.core.dependencies import get_current_user
from evensplit.schemas.friends import FriendRequestCreate, FriendRespond, FriendshipOut, FriendOut
from evensplit.services.friend_services import (
    send_friend_request, list_friend_requests, list_friends, respond_to_friend_request, remove_friend,
)

router = APIRouter()

@router.post("/requests", response_model=FriendshipOut)
async def send_request(data: FriendRequestCreate, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await send_friend_request(db, current_user.id, data.email)

@router.get("/requests", response_model=list[FriendshipOut])
async def incoming_requests(db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await list_friend_requests(db, current_user.id)

@router.post("/requests/{friendship_id}/respond")
async def respond(friendship_id: int, data: FriendRespond, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await respond_to_friend_request(db, friendship_id, current_user.id, data.response)

@router.get("/", response_model=list[FriendOut])
async def my_friends(db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await list_friends(db, current_user.id)

@router.delete("/{friendship_id}")
async def unfriend(friendship_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await remove_friend(db, friendship_id, current_user.id)
