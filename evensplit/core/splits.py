"""
Split and payment calculators.

A share is one participant's portion of an expense total. As a split it is
what the participant owes, as a payment it is what they actually put in.
Everything here is pure: totals are not sanity checked, that is the
validator's job.
"""
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Hashable, Iterable, List, Optional, Sequence

from evensplit.core.utils import qround, to_decimal, HUNDRED


class SplitMode(str, Enum):
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    CUSTOM = "custom"


class PaymentMode(str, Enum):
    SINGLE = "single"
    PERCENTAGE = "percentage"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Share:
    participant_id: Hashable
    amount: Any = None
    percentage: Optional[Any] = None


Split = Share
Payment = Share


def compute_equal_splits(total_amount, participant_ids: Sequence[Hashable]) -> List[Split]:
    if not participant_ids:
        return []

    n = Decimal(len(participant_ids))
    amount = qround(to_decimal(total_amount) / n)
    percentage = qround(HUNDRED / n)

    return [Split(pid, amount, percentage) for pid in participant_ids]


def _from_percentages(total_amount, shares: Iterable[Share]) -> List[Share]:
    total = to_decimal(total_amount)
    out = []
    for s in shares:
        if s.percentage is not None:
            amount = qround(total * to_decimal(s.percentage) / HUNDRED)
        else:
            amount = Decimal("0.00")
        out.append(replace(s, amount=amount))
    return out


def compute_percentage_splits(total_amount, splits: Iterable[Split]) -> List[Split]:
    return _from_percentages(total_amount, splits)


def compute_percentage_payments(total_amount, payments: Iterable[Payment]) -> List[Payment]:
    return _from_percentages(total_amount, payments)


def compute_single_payment(total_amount, payer_id: Hashable) -> List[Payment]:
    return [Payment(payer_id, to_decimal(total_amount), HUNDRED)]


def materialize_splits(total_amount, mode: SplitMode, participant_ids: Sequence[Hashable], splits: Sequence[Split] = ()) -> List[Split]:
    """Turn the caller's input into concrete per-participant owed amounts."""
    mode = SplitMode(mode)

    if mode is SplitMode.EQUAL:
        return compute_equal_splits(total_amount, participant_ids)
    if mode is SplitMode.PERCENTAGE:
        return compute_percentage_splits(total_amount, splits)
    return list(splits)


def materialize_payments(total_amount, mode: PaymentMode, payer_id: Hashable, payments: Sequence[Payment] = ()) -> List[Payment]:
    mode = PaymentMode(mode)

    if mode is PaymentMode.SINGLE:
        # explicit payer rows are kept as sent so the validator can check them
        if payments:
            return list(payments)
        return compute_single_payment(total_amount, payer_id)
    if mode is PaymentMode.PERCENTAGE:
        return compute_percentage_payments(total_amount, payments)
    return list(payments)
