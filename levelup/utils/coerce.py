# levelup/utils/coerce.py
from typing import Any, Optional

# Largest id a 64-bit signed INTEGER column can hold
MAX_ID = 2 ** 63 - 1


def as_int(value: Any) -> Optional[int]:
    """Integer value of `value`, or None if it is not a whole number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return as_int(float(value.strip()))
        except ValueError:
            return None
    return None


def as_id(value: Any) -> Optional[int]:
    """Positive integer that fits a database key, or None."""
    number = as_int(value)
    if number is None or not 0 < number <= MAX_ID:
        return None
    return number
