from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from evensplit.db.session import get_db
from evensplit.services.group_services import (
    create_group, add_member, list_group_for_user, get_group_by_uuid, get_group_details, delete_group,
    remove_member, edit_group, promote_to_admin, demote_from_admin, list_friends_not_in_group,
)
from evensplit.services.invitation_services import (
    invite_to_group, invite_by_email, list_user_invitations, list_group_invitations,
    respond_to_invitation, cancel_invitation,
)
from evensplit.services.balance_services import get_group_settlement_plan
from evensplit.services.expense_services import list_group_expenses
from evensplit.schemas.group import (
    GroupCreate, GroupUpdate, GroupOut, MyGroupOut, GroupDetailOut, GroupMemberOut, AddMemberIn, FriendCandidateOut,
)
from evensplit.schemas.invitation import InvitationCreate, InvitationByEmail, InvitationOut, InvitationRespond, MyInvitationOut
from evensplit.schemas.balances import GroupBalanceOut
from evensplit.schemas.expense import ExpenseOut
from evensplit.core.dependencies import get_current_user

router = APIRouter()

@router.post("/", response_model=GroupOut, status_code=201, description="create new group")
async def create_new_group(
    data:GroupCreate,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    return await create_group(db, data.name, user.id, data.description)

@router.get("/my-groups", response_model=list[MyGroupOut], description="get user groups")
async def my_groups(db: AsyncSession = Depends(get_db), user = Depends(get_current_user)):
    return await list_group_for_user(db, user.id)

@router.get("/invitations", response_model=list[MyInvitationOut], description="pending invitations for the current user")
async def my_invitations(db: AsyncSession = Depends(get_db), user = Depends(get_current_user)):
    return await list_user_invitations(db, user.id)

@router.post("/invitations/{invitation_id}/respond")
async def respond_invitation(
    invitation_id: int,
    data: InvitationRespond,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    return await respond_to_invitation(db, invitation_id, user.id, data.response)

@router.delete("/invitations/{invitation_id}")
async def cancel_invite(invitation_id: int, db: AsyncSession = Depends(get_db), user = Depends(get_current_user)):
    return await cancel_invitation(db, invitation_id, user.id)

@router.get("/by-uuid/{group_uuid}", response_model=GroupOut)
async def group_by_uuid(group_uuid: UUID, db: AsyncSession = Depends(get_db), user = Depends(get_current_user)):
    return await get_group_by_uuid(db, group_uuid, user.id)

@router.get("/{group_id}", response_model=GroupDetailOut)
async def group_details(group_id: int, db: AsyncSession = Depends(get_db), user = Depends(get_current_user)):
    return await get_group_details(db, group_id, user.id)

@router.patch("/{group_id}", response_model=GroupOut)
async def edit(group_id: int, data: GroupUpdate, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await edit_group(db, group_id, current_user.id, data)

@router.delete("/{group_id}")
async def del_group(group_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await delete_group(db, group_id=group_id, user_id=current_user.id)

@router.post("/{group_id}/members", response_model=GroupMemberOut, status_code=201)
async def add_user_to_group(
    group_id: int,
    data: AddMemberIn,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return await add_member(db, group_id, data.user_id, current_user.id, data.role)

@router.delete("/{group_id}/members/{user_id}")
async def rem_mem(group_id: int, user_id : int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await remove_member(db, group_id=group_id, member_user_id=user_id, user_id=current_user.id)

@router.post("/{group_id}/members/{user_id}/promote")
async def promote(group_id: int, user_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await promote_to_admin(db, group_id, user_id, current_user.id)

@router.post("/{group_id}/members/{user_id}/demote")
async def demote(group_id: int, user_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await demote_from_admin(db, group_id, user_id, current_user.id)

@router.get("/{group_id}/friends-not-in-group", response_model=list[FriendCandidateOut])
async def friends_not_in_group(group_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await list_friends_not_in_group(db, group_id, current_user.id)

@router.post("/{group_id}/invitations", response_model=InvitationOut, status_code=201)
async def invite(group_id: int, data: InvitationCreate, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await invite_to_group(db, group_id, data.invited_user_id, current_user.id, data.message)

@router.post("/{group_id}/invitations/by-email", response_model=InvitationOut, status_code=201)
async def invite_email(group_id: int, data: InvitationByEmail, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await invite_by_email(db, group_id, data.email, current_user.id, data.message)

@router.get("/{group_id}/invitations", response_model=list[InvitationOut])
async def group_invitations(group_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await list_group_invitations(db, group_id, current_user.id)

@router.get("/{group_id}/balances", response_model=GroupBalanceOut)
async def group_balances(group_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await get_group_settlement_plan(db, group_id=group_id, user_id=current_user.id)

@router.get("/{group_id}/expenses", response_model=list[ExpenseOut], description="get all expenses of the group")
async def fetch_expenses(
    group_id: int,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    return await list_group_expenses(db, user.id, group_id)
