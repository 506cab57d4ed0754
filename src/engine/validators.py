"""
Stable Stakes - Input Validation Utilities

Provides validation functions for game engine inputs. All validators
either return validated data or raise descriptive ValueError exceptions.
"""

from decimal import Decimal

from src.engine.base import MAX_PLAYERS, MIN_PLAYERS, PEG_COUNTS


def validate_horse_number(number: int) -> int:
    """
    Validate a horse number selected by a dice total.

    Args:
        number: Dice total / horse number

    Returns:
        Validated number

    Raises:
        ValueError: If no horse carries that number
    """
    if not isinstance(number, int):
        raise ValueError(f"Horse number must be an integer, got {type(number).__name__}.")
    if number not in PEG_COUNTS:
        raise ValueError(f"Horse number {number} is out of range. Must be between 2 and 12.")
    return number


def validate_amount(amount: Decimal | int, allow_zero: bool = True) -> Decimal:
    """
    Validate a money amount moving between balances and the pot.

    Args:
        amount: Amount to validate
        allow_zero: Whether zero is acceptable

    Returns:
        Amount as a Decimal

    Raises:
        ValueError: If the amount is negative (or zero when disallowed)
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, Decimal)):
        raise ValueError(f"Amount must be a Decimal or int, got {type(amount).__name__}.")

    value = Decimal(amount)
    if value < 0:
        raise ValueError(f"Amount cannot be negative, got {value}.")
    if not allow_zero and value == 0:
        raise ValueError("Amount must be positive.")
    return value


def validate_pot(pot: Decimal) -> Decimal:
    """Pot must never be negative."""
    if pot < 0:
        raise ValueError(f"Pot cannot be negative, got {pot}.")
    return pot


def validate_player_count(count: int) -> int:
    """
    Validate number of players.

    Raises:
        ValueError: If count is not between 4 and 12
    """
    if not isinstance(count, int):
        raise ValueError(f"Player count must be an integer, got {type(count).__name__}.")

    if not (MIN_PLAYERS <= count <= MAX_PLAYERS):
        raise ValueError(f"Player count must be {MIN_PLAYERS}-{MAX_PLAYERS}, got {count}.")

    return count
