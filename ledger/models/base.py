from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Annotated, Any
from uuid import uuid4

from bson import Decimal128
from pydantic import BeforeValidator

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


def to_money(value: Any) -> Decimal:
    """Coerce a number, numeric string or Decimal128 to a 2-place Decimal."""
    if isinstance(value, Decimal128):
        value = value.to_decimal()
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not amount.is_finite():
            raise ValueError(f"Invalid amount: {value!r}")
        # Too many digits for the context precision raises InvalidOperation
        return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid amount: {value!r}")


Money = Annotated[Decimal, BeforeValidator(to_money)]
