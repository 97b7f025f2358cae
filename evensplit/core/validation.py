from collections import Counter
from dataclasses import dataclass
from typing import Hashable, Iterable, List, Optional, Sequence

from evensplit.core.splits import PaymentMode, Payment, Share, Split, SplitMode
from evensplit.core.utils import qround, to_decimal, HUNDRED, TOLERANCE, ZERO


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None

    def __bool__(self):
        return self.is_valid


VALID = ValidationResult(True)

SINGLE_PAYER_ROWS_ERROR = "Single payer mode takes exactly one payment"


def _sum_percentages(items: Iterable[Share]):
    return sum((to_decimal(i.percentage) for i in items), ZERO)


def _sum_amounts(items: Iterable[Share]):
    return sum((to_decimal(i.amount) for i in items), ZERO)


def validate_splits(total_amount, splits: Sequence[Split], mode: SplitMode) -> ValidationResult:
    if not splits:
        return ValidationResult(False, "No splits provided")

    mode = SplitMode(mode)
    total = to_decimal(total_amount)

    if mode is SplitMode.PERCENTAGE:
        pct = _sum_percentages(splits)
        if abs(pct - HUNDRED) > TOLERANCE:
            return ValidationResult(
                False, f"Percentages must add up to 100%, currently {qround(pct)}%"
            )

    elif mode is SplitMode.CUSTOM:
        summed = _sum_amounts(splits)
        if abs(summed - total) > TOLERANCE:
            return ValidationResult(
                False,
                f"Split amounts must add up to {qround(total)}, currently {qround(summed)}",
            )

    return VALID


def validate_payments(total_amount, payments: Sequence[Payment], mode: PaymentMode) -> ValidationResult:
    if not payments:
        return ValidationResult(False, "No payments provided")

    mode = PaymentMode(mode)
    total = to_decimal(total_amount)

    if mode is PaymentMode.SINGLE:
        paid = to_decimal(payments[0].amount)
        if abs(paid - total) > TOLERANCE:
            return ValidationResult(
                False, f"Single payer must pay the full amount of {qround(total)}"
            )

    elif mode is PaymentMode.PERCENTAGE:
        pct = _sum_percentages(payments)
        if abs(pct - HUNDRED) > TOLERANCE:
            return ValidationResult(
                False,
                f"Payment percentages must add up to 100%, currently {qround(pct)}%",
            )

    elif mode is PaymentMode.CUSTOM:
        summed = _sum_amounts(payments)
        if abs(summed - total) > TOLERANCE:
            return ValidationResult(
                False,
                f"Payment amounts must add up to {qround(total)}, currently {qround(summed)}",
            )

    return VALID


def find_duplicate_participants(items: Iterable[Share]) -> List[Hashable]:
    counts = Counter(i.participant_id for i in items)
    return [pid for pid, n in counts.items() if n > 1]
