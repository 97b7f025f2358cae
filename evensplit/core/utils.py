from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext, localcontext
from datetime import datetime, timezone

getcontext().prec = 28
CENTS = Decimal("0.01")
TOLERANCE = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

def qround(d: Decimal) -> Decimal:
    # quantize needs every integer digit plus two cents digits inside the context precision
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, d.adjusted() + 4)
        try:
            return d.quantize(CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return d

def to_decimal(value) -> Decimal:
    """Lenient parse: anything that is not a finite number counts as zero."""
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO

    if not d.is_finite():
        return ZERO
    return d

def format_currency(amount, currency: str = "USD") -> str:
    return f"{currency} {qround(to_decimal(amount))}"

def as_utc(dt: datetime) -> datetime:
    # sqlite hands back naive datetimes even for timezone=True columns
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
