from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError

from ..constants import CENT, MAX_AMOUNT


# ------------------------------------
# Input checks shared by the workflows
# ------------------------------------
def has_cents_precision(value: Decimal) -> bool:
    """
    True when `value` is a whole number of cents ("10.5" and "10.500" pass,
    "10.005" fails). Callers bound the value first so quantize() cannot
    overflow the decimal context.
    """
    return value == value.quantize(CENT)


def positive_decimal(value, label, maximum=MAX_AMOUNT):
    """
    Coerce `value` to a Decimal that fits a 2-place money/quantity column.
    Raises ValidationError naming `label` otherwise.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a number")
    if isinstance(value, float):
        value = str(value)
    try:
        number = Decimal(str(value).strip())
    except (TypeError, ValueError, InvalidOperation):
        raise ValidationError(f"{label} must be a number")
    if not number.is_finite():
        raise ValidationError(f"{label} must be a number")
    if number <= 0:
        raise ValidationError(f"{label} must be greater than 0")
    if number > maximum:
        raise ValidationError(f"{label} cannot exceed {maximum}")
    if not has_cents_precision(number):
        raise ValidationError(f"{label} cannot have more than 2 decimal places")
    return number
