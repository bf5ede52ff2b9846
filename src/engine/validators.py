"""
Incredicer - Input Validation Utilities

Provides validation functions for engine inputs. All validators either
return normalized data or raise descriptive ValueError exceptions. They
guard against programmer errors (NaN amounts, negative counts in a save);
expected gameplay refusals are boolean results, never exceptions.
"""

import math


def validate_amount(amount: float, name: str = "Amount") -> float:
    """
    Validate a currency amount.

    Args:
        amount: Value to validate (may be zero or negative)
        name: Label used in error messages

    Returns:
        Amount as a float

    Raises:
        ValueError: If the amount is not a finite number
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ValueError(f"{name} must be a number, got {type(amount).__name__}.")

    if math.isnan(amount) or math.isinf(amount):
        raise ValueError(f"{name} must be finite, got {amount}.")

    return float(amount)


def validate_balance(amount: float, name: str = "Balance") -> float:
    """
    Validate a stored balance.

    Args:
        amount: Balance to validate
        name: Label used in error messages

    Returns:
        Balance as a float

    Raises:
        ValueError: If the balance is not finite or is negative
    """
    value = validate_amount(amount, name)
    if value < 0:
        raise ValueError(f"{name} cannot be negative, got {value}.")
    return value


def validate_count(count: int, name: str = "Count") -> int:
    """
    Validate a non-negative integer such as an owned count or a level.

    Args:
        count: Value to validate
        name: Label used in error messages

    Returns:
        Validated count

    Raises:
        ValueError: If count is not a non-negative integer
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValueError(f"{name} must be an integer, got {type(count).__name__}.")

    if count < 0:
        raise ValueError(f"{name} cannot be negative, got {count}.")

    return count


def clamp(value: float, minimum: float | None = None, maximum: float | None = None) -> float:
    """Clamp value into [minimum, maximum]; either bound may be open."""
    if minimum is not None and value < minimum:
        return minimum
    if maximum is not None and value > maximum:
        return maximum
    return value
