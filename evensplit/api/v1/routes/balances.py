from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from evensplit.db.session import get_db
from evensplit.core.dependencies import get_current_user
from evensplit.schemas.balances import UserBalanceOut
from evensplit.services.balance_services import get_user_balance

router = APIRouter()

@router.get("/me", response_model=UserBalanceOut)
async def my_balance(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return await get_user_balance(db, current_user.id)
