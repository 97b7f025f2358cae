from decimal import Decimal
from typing import Dict, Hashable, Iterable, List, NamedTuple

from evensplit.core.splits import Payment, Split
from evensplit.core.utils import to_decimal, TOLERANCE, ZERO


class Transfer(NamedTuple):
    from_id: Hashable
    to_id: Hashable
    amount: Decimal


def compute_balances(splits: Iterable[Split], payments: Iterable[Payment]) -> Dict[Hashable, Decimal]:
    """Net position per participant: what they paid minus what they owe."""
    balances: Dict[Hashable, Decimal] = {}

    for s in splits:
        balances[s.participant_id] = balances.get(s.participant_id, ZERO) - to_decimal(s.amount)

    for p in payments:
        balances[p.participant_id] = balances.get(p.participant_id, ZERO) + to_decimal(p.amount)

    return balances


def compute_debts(splits: Iterable[Split], payments: Iterable[Payment]) -> List[Transfer]:
    """
    Greedy settlement: debtors are matched against creditors in the order they
    first appear. Not guaranteed to use the fewest transfers.
    """
    balances = compute_balances(splits or (), payments or ())

    creditors = [[uid, bal] for uid, bal in balances.items() if bal > TOLERANCE]
    debtors = [[uid, -bal] for uid, bal in balances.items() if bal < -TOLERANCE]

    transfers: List[Transfer] = []

    for debt_id, remaining_debt in debtors:
        for cred in creditors:
            cred_id, cred_amt = cred

            if remaining_debt <= TOLERANCE:
                break
            if cred_amt <= TOLERANCE:
                continue

            settle_amt = min(remaining_debt, cred_amt)
            transfers.append(Transfer(debt_id, cred_id, settle_amt))

            remaining_debt -= settle_amt
            cred[1] = cred_amt - settle_amt

    return [t for t in transfers if t.amount > TOLERANCE]
