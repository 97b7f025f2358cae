"""Plain-English descriptions of expense edits, stored in the edit history."""
from collections.abc import Mapping
from decimal import Decimal
from typing import Callable, Optional

from evensplit.core.utils import to_decimal

SPLIT_MODE_LABELS = {
    "equal": "equal split",
    "percentage": "percentage split",
    "custom": "custom amounts",
}

PAYMENT_MODE_LABELS = {
    "single": "single payer",
    "percentage": "percentage payments",
    "custom": "custom payments",
}


def _share_fields(item):
    if isinstance(item, Mapping):
        pid = item.get("participant_id", item.get("user_id"))
        return pid, item.get("amount"), item.get("percentage")
    return item.participant_id, item.amount, item.percentage


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return repr([_share_fields(v) for v in value])
    return str(value)


def _fmt_percentage(value) -> str:
    d = to_decimal(value)
    if d == d.to_integral_value():
        return str(d.quantize(Decimal(1)))
    return str(d.normalize())


def _same_shares(before, after) -> bool:
    if len(before) != len(after):
        return False
    for b, a in zip(before, after):
        b_id, b_amt, b_pct = _share_fields(b)
        a_id, a_amt, a_pct = _share_fields(a)
        if b_id != a_id or _as_text(b_amt) != _as_text(a_amt):
            return False
        if (b_pct is None) != (a_pct is None):
            return False
        if b_pct is not None and to_decimal(b_pct) != to_decimal(a_pct):
            return False
    return True


def _fmt_shares(shares, display_name, empty: str) -> str:
    if not shares:
        return empty

    parts = []
    for s in shares:
        pid, amount, percentage = _share_fields(s)
        name = display_name(pid)
        if amount not in (None, ""):
            parts.append(f"{name}: {amount}")
        elif percentage:
            parts.append(f"{name}: {_fmt_percentage(percentage)}%")
        else:
            parts.append(f"{name}: 0")
    return ", ".join(parts)


def describe_expense_change(
    field: str,
    before,
    after,
    get_user_name: Optional[Callable[[object], str]] = None,
) -> Optional[str]:
    """
    Describe a single field edit, or return None when nothing changed.

    ``get_user_name`` maps a participant id to a display name; without it the
    local part of an email address or the raw id is shown.
    """

    def display_name(pid) -> str:
        if get_user_name is not None:
            return get_user_name(pid)
        text = str(pid)
        if "@" in text:
            return text.split("@")[0] or text
        return text

    if field in ("splits", "payments"):
        before_list = list(before) if isinstance(before, (list, tuple)) else []
        after_list = list(after) if isinstance(after, (list, tuple)) else []

        if _same_shares(before_list, after_list):
            return None

        label = "Splits" if field == "splits" else "Payments"
        empty = "no splits" if field == "splits" else "no payments"
        return (
            f"{label} changed from {_fmt_shares(before_list, display_name, empty)}"
            f" to {_fmt_shares(after_list, display_name, empty)}"
        )

    before = getattr(before, "value", before)
    after = getattr(after, "value", after)

    if _as_text(before) == _as_text(after):
        return None

    if field == "title":
        return f'Title changed from "{before}" to "{after}"'
    if field == "amount":
        return f"Amount changed from {before} to {after}"
    if field == "currency":
        return f"Currency changed from {before} to {after}"
    if field == "category":
        return f"Category changed from {before or 'none'} to {after or 'none'}"
    if field == "description":
        return f"Description changed from {before or 'empty'} to {after or 'empty'}"
    if field == "date":
        return f"Date changed from {before} to {after}"
    if field == "split_mode":
        return (
            f"Split method changed from {SPLIT_MODE_LABELS.get(before, 'custom amounts')}"
            f" to {SPLIT_MODE_LABELS.get(after, 'custom amounts')}"
        )
    if field == "payment_mode":
        return (
            f"Payment method changed from {PAYMENT_MODE_LABELS.get(before, 'custom payments')}"
            f" to {PAYMENT_MODE_LABELS.get(after, 'custom payments')}"
        )

    return f"{field[:1].upper()}{field[1:]} changed from {before} to {after}"
