"""
Gift card amount rules.

Amounts are in minor currency units (Rappen for CHF). A request either picks
one of the fixed preset cards or asks for a free amount inside the allowed
range.
"""
from typing import Any, FrozenSet

from ..errors import AmountOutOfRange, InvalidAmount, InvalidPreset

PRESET_AMOUNTS: FrozenSet[int] = frozenset(
    {5000, 10000, 15000, 20000, 30000, 40000, 50000, 60000}
)
MIN_AMOUNT = 3000
MAX_AMOUNT = 60000


def coerce_amount(value: Any) -> int:
    """Return ``value`` as an int or raise InvalidAmount.

    Accepts ints, integral floats (``5000.0``) and integer strings
    (``"5000"``). Booleans are rejected even though they subclass int.
    """
    if isinstance(value, bool):
        raise InvalidAmount()
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise InvalidAmount()
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise InvalidAmount() from None
    raise InvalidAmount()


def validate_amount(amount: Any, preset: Any = False) -> int:
    """Validate a requested charge and return it as an int.

    Only ``preset is True`` selects the preset branch; any other value is
    treated as a free amount.
    """
    value = coerce_amount(amount)
    if preset is True:
        if value not in PRESET_AMOUNTS:
            raise InvalidPreset()
        return value
    if value < MIN_AMOUNT or value > MAX_AMOUNT:
        raise AmountOutOfRange()
    return value
