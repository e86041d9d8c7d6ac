from decimal import Decimal, InvalidOperation

from storefront.core.exceptions import InvalidAmountError

ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    """Coerce ints, strings, floats and column values to ``Decimal``.

    Floats go through ``str`` so ``0.1`` stays ``Decimal("0.1")``.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(f"Invalid amount: {value!r}")


def require_positive(value) -> Decimal:
    amount = to_decimal(value)
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError("Amount must be greater than zero")
    return amount


def format_amount(value) -> str:
    """Render an amount without trailing zeros or exponent: 50, 12.5, -0.25."""
    d = to_decimal(value)
    if d == d.to_integral_value():
        return str(d.quantize(Decimal(1)))
    return format(d.normalize(), "f")


def as_float(value) -> float:
    return float(value) if value is not None else 0.0
