"""
Stable Stakes Game Engine.

Pure Python game logic with zero UI/database dependencies.
Handles dealing, scratches, the card market, race rolls, payouts,
bailouts and final standings.
"""

from src.engine.base import (
    Card,
    DayConfig,
    DayMode,
    DiceRoll,
    Horse,
    Listing,
    Phase,
    Player,
    Suit,
)
from src.engine.deck import DeckEngine
from src.engine.ledger import EconomyLedger
from src.engine.market import MarketEngine, MarketState
from src.engine.policy import ActorPolicy, RandomPolicy
from src.engine.race import RaceEngine, RaceState, RollKind, RollOutcome
from src.engine.standings import Standing, StandingsEngine

__all__ = [
    # Data Classes
    "Card",
    "DayConfig",
    "DiceRoll",
    "Horse",
    "Listing",
    "Player",
    "MarketState",
    "RaceState",
    "RollOutcome",
    "Standing",
    # Enums
    "DayMode",
    "Phase",
    "RollKind",
    "Suit",
    # Engines
    "DeckEngine",
    "EconomyLedger",
    "MarketEngine",
    "RaceEngine",
    "StandingsEngine",
    # Policies
    "ActorPolicy",
    "RandomPolicy",
]
