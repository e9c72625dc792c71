"""Decimal and minor-unit amount helpers"""

from decimal import Decimal, Inexact, InvalidOperation, localcontext

from splitbill.core.exceptions import InvalidAmountError

# Width of the MinorUnits column
MAX_AMOUNT_DIGITS = 80


def to_minor_units(value: Decimal, decimal_places: int) -> int:
    """
    Convert a major-unit decimal amount to integer minor units.

    Args:
        value: Amount in major units (e.g. "1.5" ether)
        decimal_places: Number of minor-unit digits per major unit

    Returns:
        Integer amount in minor units

    Raises:
        InvalidAmountError: If the amount is not finite, has more
            fractional digits than decimal_places allows, or has more
            than MAX_AMOUNT_DIGITS digits in minor units
    """
    try:
        value = Decimal(str(value))
    except InvalidOperation:
        raise InvalidAmountError(f"Amount {value!r} is not a number")

    if not value.is_finite():
        raise InvalidAmountError(f"Amount {value} is not a finite number")
    if value.is_zero():
        return 0

    # adjusted() is the exponent of the leading digit
    if value.adjusted() + decimal_places + 1 > MAX_AMOUNT_DIGITS:
        raise InvalidAmountError(
            f"Amount {value} exceeds {MAX_AMOUNT_DIGITS} digits in minor units"
        )

    with localcontext() as ctx:
        ctx.prec = len(value.as_tuple().digits) + MAX_AMOUNT_DIGITS
        ctx.traps[Inexact] = True
        scaled = value.scaleb(decimal_places)
        if scaled != scaled.to_integral_value():
            raise InvalidAmountError(
                f"Amount {value} has more than {decimal_places} decimal places"
            )
        return int(scaled)


def from_minor_units(value: int, decimal_places: int) -> Decimal:
    """
    Convert integer minor units back to a major-unit decimal.

    Args:
        value: Amount in minor units
        decimal_places: Number of minor-unit digits per major unit

    Returns:
        Decimal amount in major units without trailing zeros
    """
    with localcontext() as ctx:
        ctx.prec = MAX_AMOUNT_DIGITS
        amount = Decimal(value).scaleb(-decimal_places).normalize()
        # normalize() renders 100 as 1E+2
        if amount == amount.to_integral_value():
            return amount.quantize(Decimal(1))
        return amount
