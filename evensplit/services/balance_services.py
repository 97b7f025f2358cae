from typing import List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from evensplit.core.balances import compute_balances, compute_debts
from evensplit.core.dependencies import check_group_membership
from evensplit.core.splits import Payment, Split
from evensplit.core.utils import qround, TOLERANCE, ZERO
from evensplit.models.expense import Expense
from evensplit.models.expense_payment import ExpensePayment
from evensplit.models.expense_split import ExpenseSplit
from evensplit.services.user_service import get_display_names

async def _collect_shares(db: AsyncSession, expense_filter) -> Tuple[List[Split], List[Payment]]:
    splits_q = (
        select(ExpenseSplit.user_id, ExpenseSplit.amount)
        .join(Expense, Expense.id == ExpenseSplit.expense_id)
        .where(expense_filter)
        .order_by(Expense.date, Expense.id, ExpenseSplit.id)
    )
    payments_q = (
        select(ExpensePayment.user_id, ExpensePayment.amount)
        .join(Expense, Expense.id == ExpensePayment.expense_id)
        .where(expense_filter)
        .order_by(Expense.date, Expense.id, ExpensePayment.id)
    )

    splits_res = await db.execute(splits_q)
    payments_res = await db.execute(payments_q)

    splits = [Split(uid, amount) for uid, amount in splits_res.all()]
    payments = [Payment(uid, amount) for uid, amount in payments_res.all()]
    return splits, payments

def _annotate(transfers, names):
    return [
        {
            "from_id": f,
            "from_name": names.get(f),
            "to_id": t,
            "to_name": names.get(t),
            "amount": qround(a)
        }
        for f, t, a in transfers
    ]

async def get_group_settlement_plan(db: AsyncSession, group_id: int, user_id: int):
    await check_group_membership(db, group_id, user_id)

    splits, payments = await _collect_shares(db, Expense.group_id == group_id)

    # Drop near-zero balances
    net = {
        uid: qround(amt)
        for uid, amt in compute_balances(splits, payments).items()
        if abs(amt) > TOLERANCE
    }

    transfers = compute_debts(splits, payments)

    if not transfers:
        return {"net": net, "settlements": []}

    names = await get_display_names(db, {u for t in transfers for u in (t.from_id, t.to_id)})
    return {"net": net, "settlements": _annotate(transfers, names)}

async def get_user_balance(db: AsyncSession, user_id: int):
    split_ids = select(ExpenseSplit.expense_id).where(ExpenseSplit.user_id == user_id)
    payment_ids = select(ExpensePayment.expense_id).where(ExpensePayment.user_id == user_id)

    splits, payments = await _collect_shares(
        db, or_(Expense.id.in_(split_ids), Expense.id.in_(payment_ids))
    )

    net = compute_balances(splits, payments).get(user_id, ZERO)
    transfers = [t for t in compute_debts(splits, payments) if user_id in (t.from_id, t.to_id)]

    names = await get_display_names(db, {u for t in transfers for u in (t.from_id, t.to_id)})
    annotated = _annotate(transfers, names)

    return {
        "user_id": user_id,
        "net_balance": qround(net),
        "you_owe": [t for t in annotated if t["from_id"] == user_id],
        "owed_to_you": [t for t in annotated if t["to_id"] == user_id]
    }
