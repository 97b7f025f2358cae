import logging
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, or_
from fastapi import HTTPException

from evensplit.core.balances import compute_debts
from evensplit.core.dependencies import check_group_membership, get_membership
from evensplit.core.history import describe_expense_change
from evensplit.core.splits import PaymentMode, Share, materialize_payments, materialize_splits
from evensplit.core.utils import format_currency, qround, to_decimal
from evensplit.core.validation import (
    SINGLE_PAYER_ROWS_ERROR, find_duplicate_participants, validate_payments, validate_splits,
)
from evensplit.models.expense import Expense
from evensplit.models.expense_comment import ExpenseComment
from evensplit.models.expense_history import ExpenseHistory
from evensplit.models.expense_payment import ExpensePayment
from evensplit.models.expense_split import ExpenseSplit
from evensplit.models.group_member import ROLE_ADMIN
from evensplit.services.group_services import get_member_ids
from evensplit.services.user_service import get_display_names, get_users_by_ids

logger = logging.getLogger(__name__)

TRACKED_FIELDS = ("title", "amount", "currency", "category", "description", "date", "split_mode", "payment_mode")

def _to_row_values(share: Share) -> dict:
    pct = share.percentage
    return {
        "user_id": share.participant_id,
        "amount": qround(to_decimal(share.amount)),
        "percentage": qround(to_decimal(pct)) if pct is not None else None
    }

def _shares(rows) -> List[Share]:
    return [Share(r.user_id, r.amount, r.percentage) for r in rows]

def _share_dicts(rows) -> List[dict]:
    return [
        {"user_id": r.user_id, "amount": r.amount, "percentage": r.percentage}
        for r in rows
    ]

async def _prepare_shares(db: AsyncSession, data, default_payer_id: int, group_id: int | None):
    splits_in = [s.to_share() for s in data.splits or []]
    payments_in = [p.to_share() for p in data.payments or []]

    if splits_in:
        participant_ids = [s.participant_id for s in splits_in]
    elif group_id is not None:
        participant_ids = await get_member_ids(db, group_id)
    else:
        participant_ids = [default_payer_id]

    splits = materialize_splits(data.amount, data.split_mode, participant_ids, splits_in)
    payments = materialize_payments(data.amount, data.payment_mode, default_payer_id, payments_in)

    if find_duplicate_participants(splits):
        raise HTTPException(400, "Duplicate users found in splits")
    if find_duplicate_participants(payments):
        raise HTTPException(400, "Duplicate users found in payments")
    if PaymentMode(data.payment_mode) is PaymentMode.SINGLE and len(payments) > 1:
        raise HTTPException(400, SINGLE_PAYER_ROWS_ERROR)

    for result in (
        validate_splits(data.amount, splits, data.split_mode),
        validate_payments(data.amount, payments, data.payment_mode),
    ):
        if not result.is_valid:
            logger.warning("rejected expense shares: %s", result.error)
            raise HTTPException(400, result.error)

    involved = {s.participant_id for s in splits} | {p.participant_id for p in payments}

    if group_id is not None:
        members = set(await get_member_ids(db, group_id))
        if not involved <= members:
            raise HTTPException(400, "Some users in split are not group members")
    else:
        known = await get_users_by_ids(db, involved)
        if len(known) != len(involved):
            raise HTTPException(400, "Some users in split do not exist")

    return splits, payments

async def _load_shares(db: AsyncSession, expense_ids: List[int]):
    splits_map: Dict[int, list] = {}
    payments_map: Dict[int, list] = {}

    if not expense_ids:
        return splits_map, payments_map

    res = await db.execute(
        select(ExpenseSplit)
        .where(ExpenseSplit.expense_id.in_(expense_ids))
        .order_by(ExpenseSplit.id)
    )
    for s in res.scalars().all():
        splits_map.setdefault(s.expense_id, []).append(s)

    res = await db.execute(
        select(ExpensePayment)
        .where(ExpensePayment.expense_id.in_(expense_ids))
        .order_by(ExpensePayment.id)
    )
    for p in res.scalars().all():
        payments_map.setdefault(p.expense_id, []).append(p)

    return splits_map, payments_map

def _serialize(expense: Expense, splits, payments) -> dict:
    return {
        "id": expense.id,
        "title": expense.title,
        "amount": qround(to_decimal(expense.amount)),
        "currency": expense.currency,
        "category": expense.category,
        "description": expense.description,
        "date": expense.date,
        "created_by": expense.created_by,
        "group_id": expense.group_id,
        "split_mode": expense.split_mode,
        "payment_mode": expense.payment_mode,
        "created_at": expense.created_at,
        "updated_at": expense.updated_at,
        "splits": _share_dicts(splits),
        "payments": _share_dicts(payments)
    }

async def _get_expense(db: AsyncSession, expense_id: int) -> Expense:
    res = await db.execute(select(Expense).where(Expense.id == expense_id))
    expense = res.scalar_one_or_none()

    if not expense:
        raise HTTPException(404, "Expense not found")
    return expense

async def _check_read_access(db: AsyncSession, expense: Expense, user_id: int):
    if expense.created_by == user_id:
        return

    if expense.group_id is not None and await get_membership(db, expense.group_id, user_id):
        return

    for model in (ExpenseSplit, ExpensePayment):
        res = await db.execute(
            select(model.id).where(model.expense_id == expense.id, model.user_id == user_id)
        )
        if res.first():
            return

    raise HTTPException(403, "Unauthorized access")

async def _check_write_access(db: AsyncSession, expense: Expense, user_id: int):
    if expense.created_by == user_id:
        return

    if expense.group_id is not None:
        member = await get_membership(db, expense.group_id, user_id)
        if member and member.role == ROLE_ADMIN:
            return

    raise HTTPException(403, "Only the creator or a group admin can change this expense")

def _add_shares(db: AsyncSession, expense_id: int, splits, payments):
    for s in splits:
        db.add(ExpenseSplit(expense_id=expense_id, **_to_row_values(s)))
    for p in payments:
        db.add(ExpensePayment(expense_id=expense_id, **_to_row_values(p)))

async def create_expense(db: AsyncSession, data, user_id: int):
    if data.group_id is not None:
        await check_group_membership(db, data.group_id, user_id)

    splits, payments = await _prepare_shares(db, data, user_id, data.group_id)

    expense = Expense(
        title=data.title,
        amount=data.amount,
        currency=data.currency.upper(),
        category=data.category,
        description=data.description,
        date=data.date,
        created_by=user_id,
        group_id=data.group_id,
        split_mode=data.split_mode.value,
        payment_mode=data.payment_mode.value
    )
    db.add(expense)
    await db.flush()  # gives expense.id

    _add_shares(db, expense.id, splits, payments)

    db.add(ExpenseHistory(
        expense_id=expense.id,
        change_type="created",
        changed_by=user_id,
        changes=[f'Expense "{data.title}" created for {format_currency(data.amount, expense.currency)}']
    ))

    await db.commit()
    await db.refresh(expense)

    logger.info("expense %s created by user %s", expense.id, user_id)
    return await get_expense_by_id(db, expense.id, user_id)

async def update_expense(db: AsyncSession, data, expense_id: int, user_id: int):
    expense = await _get_expense(db, expense_id)
    await _check_write_access(db, expense, user_id)

    splits, payments = await _prepare_shares(db, data, expense.created_by, expense.group_id)

    splits_map, payments_map = await _load_shares(db, [expense_id])
    old_splits = _share_dicts(splits_map.get(expense_id, []))
    old_payments = _share_dicts(payments_map.get(expense_id, []))
    new_splits = [_to_row_values(s) for s in splits]
    new_payments = [_to_row_values(p) for p in payments]

    before = {
        "title": expense.title,
        "amount": qround(to_decimal(expense.amount)),
        "currency": expense.currency,
        "category": expense.category,
        "description": expense.description,
        "date": expense.date,
        "split_mode": expense.split_mode,
        "payment_mode": expense.payment_mode
    }
    after = {
        "title": data.title,
        "amount": qround(data.amount),
        "currency": data.currency.upper(),
        "category": data.category,
        "description": data.description,
        "date": data.date,
        "split_mode": data.split_mode.value,
        "payment_mode": data.payment_mode.value
    }

    user_ids = {s["user_id"] for s in old_splits + old_payments + new_splits + new_payments}
    names = await get_display_names(db, user_ids)

    def user_name(uid):
        return names.get(uid, str(uid))

    changes = [describe_expense_change(f, before[f], after[f], user_name) for f in TRACKED_FIELDS]
    changes.append(describe_expense_change("splits", old_splits, new_splits, user_name))
    changes.append(describe_expense_change("payments", old_payments, new_payments, user_name))
    changes = [c for c in changes if c]

    for field in TRACKED_FIELDS:
        setattr(expense, field, after[field])

    # splits and payments carry no identity of their own, replace them wholesale
    await db.execute(delete(ExpenseSplit).where(ExpenseSplit.expense_id == expense_id))
    await db.execute(delete(ExpensePayment).where(ExpensePayment.expense_id == expense_id))
    _add_shares(db, expense_id, splits, payments)

    if changes or data.reason:
        db.add(ExpenseHistory(
            expense_id=expense_id,
            change_type="updated",
            changed_by=user_id,
            reason=data.reason,
            changes=changes
        ))

    await db.commit()
    await db.refresh(expense)

    logger.info("expense %s updated by user %s (%d changes)", expense_id, user_id, len(changes))
    return await get_expense_by_id(db, expense_id, user_id)

async def delete_expense(db: AsyncSession, user_id: int, expense_id: int):
    expense = await _get_expense(db, expense_id)
    await _check_write_access(db, expense, user_id)

    # cascades splits, payments, history and comments
    await db.delete(expense)
    await db.commit()

    logger.info("expense %s deleted by user %s", expense_id, user_id)
    return {"status": "deleted"}

async def get_expense_by_id(db: AsyncSession, expense_id: int, user_id: int):
    expense = await _get_expense(db, expense_id)
    await _check_read_access(db, expense, user_id)

    splits_map, payments_map = await _load_shares(db, [expense_id])
    splits = splits_map.get(expense_id, [])
    payments = payments_map.get(expense_id, [])

    history_res = await db.execute(
        select(ExpenseHistory)
        .where(ExpenseHistory.expense_id == expense_id)
        .order_by(ExpenseHistory.created_at.desc(), ExpenseHistory.id.desc())
    )

    data = _serialize(expense, splits, payments)
    data["history"] = history_res.scalars().all()
    data["comments"] = await _list_comments(db, expense_id)
    data["debts"] = [
        {"from_id": t.from_id, "to_id": t.to_id, "amount": qround(t.amount)}
        for t in compute_debts(_shares(splits), _shares(payments))
    ]
    return data

async def _serialize_many(db: AsyncSession, expenses) -> List[dict]:
    splits_map, payments_map = await _load_shares(db, [e.id for e in expenses])
    return [
        _serialize(e, splits_map.get(e.id, []), payments_map.get(e.id, []))
        for e in expenses
    ]

async def get_expenses(db: AsyncSession, user_id: int):
    split_ids = select(ExpenseSplit.expense_id).where(ExpenseSplit.user_id == user_id)
    payment_ids = select(ExpensePayment.expense_id).where(ExpensePayment.user_id == user_id)

    q = (
        select(Expense)
        .where(
            or_(
                Expense.created_by == user_id,
                Expense.id.in_(split_ids),
                Expense.id.in_(payment_ids)
            )
        )
        .order_by(Expense.date.desc(), Expense.id.desc())
    )

    res = await db.execute(q)
    return await _serialize_many(db, res.scalars().all())

async def list_group_expenses(db: AsyncSession, user_id: int, group_id: int):
    await check_group_membership(db, group_id, user_id)

    res = await db.execute(
        select(Expense)
        .where(Expense.group_id == group_id)
        .order_by(Expense.date.desc(), Expense.id.desc())
    )
    return await _serialize_many(db, res.scalars().all())

async def get_expense_debts(db: AsyncSession, expense_id: int, user_id: int):
    expense = await _get_expense(db, expense_id)
    await _check_read_access(db, expense, user_id)

    splits_map, payments_map = await _load_shares(db, [expense_id])
    transfers = compute_debts(
        _shares(splits_map.get(expense_id, [])),
        _shares(payments_map.get(expense_id, []))
    )
    return [
        {"from_id": t.from_id, "to_id": t.to_id, "amount": qround(t.amount)}
        for t in transfers
    ]

async def _list_comments(db: AsyncSession, expense_id: int):
    res = await db.execute(
        select(ExpenseComment)
        .where(ExpenseComment.expense_id == expense_id)
        .order_by(ExpenseComment.created_at, ExpenseComment.id)
    )
    return res.scalars().all()

async def list_comments(db: AsyncSession, expense_id: int, user_id: int):
    expense = await _get_expense(db, expense_id)
    await _check_read_access(db, expense, user_id)
    return await _list_comments(db, expense_id)

async def add_comment(db: AsyncSession, expense_id: int, user_id: int, comment: str):
    expense = await _get_expense(db, expense_id)
    await _check_read_access(db, expense, user_id)

    entry = ExpenseComment(expense_id=expense_id, user_id=user_id, comment=comment)
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return entry
