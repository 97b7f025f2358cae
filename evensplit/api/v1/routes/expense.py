from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from evensplit.db.session import get_db
from evensplit.schemas.expense import ExpenseCreate, ExpenseUpdate, ExpenseOut, ExpenseDetailOut, CommentCreate, CommentOut, DebtOut
from evensplit.services.expense_services import (
    create_expense, delete_expense, update_expense, get_expenses, get_expense_by_id,
    get_expense_debts, add_comment, list_comments,
)
from evensplit.core.dependencies import get_current_user

router = APIRouter()

@router.post("/", response_model=ExpenseDetailOut, status_code=201)
async def add_expense(data: ExpenseCreate, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await create_expense(db, data, current_user.id)

@router.get("/", response_model=list[ExpenseOut])
async def my_expenses(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return await get_expenses(db, user_id=current_user.id)

@router.delete("/{expense_id}")
async def del_expense(expense_id: int, db:AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await delete_expense(db, user_id=current_user.id, expense_id=expense_id)

@router.put("/{expense_id}", response_model=ExpenseDetailOut)
async def edit(data: ExpenseUpdate, expense_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await update_expense(db, data, expense_id=expense_id, user_id=current_user.id)

@router.get("/{expense_id}", response_model=ExpenseDetailOut)
async def fetch(
    expense_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return await get_expense_by_id(
        db,
        expense_id=expense_id,
        user_id=current_user.id
    )

@router.get("/{expense_id}/debts", response_model=list[DebtOut])
async def debts(expense_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await get_expense_debts(db, expense_id, current_user.id)

@router.get("/{expense_id}/comments", response_model=list[CommentOut])
async def comments(expense_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await list_comments(db, expense_id, current_user.id)

@router.post("/{expense_id}/comments", response_model=CommentOut, status_code=201)
async def comment(expense_id: int, data: CommentCreate, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await add_comment(db, expense_id, current_user.id, data.comment)
