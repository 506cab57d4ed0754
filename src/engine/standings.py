"""
Stable Stakes - Standings

Final ranking at the end of a racing day. Eliminated seats rank last,
everyone else by descending balance. Ties share a rank and the next
distinct seat takes its position number (1, 2, 2, 4).
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from src.engine.base import HUMAN_PLAYER_ID, Player


@dataclass(frozen=True)
class Standing:
    """One row of the final table."""
    rank: int
    player_id: int
    name: str
    balance: Decimal
    eliminated: bool

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "player_id": self.player_id,
            "name": self.name,
            "balance": str(self.balance),
            "eliminated": self.eliminated,
        }


class StandingsEngine:
    """Stateless ranking helpers."""

    @classmethod
    def compute(cls, players: Sequence[Player]) -> tuple[Standing, ...]:
        """
        Rank all seats with standard competition ranking.

        Args:
            players: Seats at day end

        Returns:
            Standings ordered best first
        """
        ordered = sorted(players, key=lambda p: (p.eliminated, -p.balance, p.id))
        standings: list[Standing] = []
        previous: Standing | None = None

        for position, player in enumerate(ordered, start=1):
            tied = (
                previous is not None
                and previous.eliminated == player.eliminated
                and previous.balance == player.balance
            )
            rank = previous.rank if tied else position
            previous = Standing(
                rank=rank,
                player_id=player.id,
                name=player.name,
                balance=player.balance,
                eliminated=player.eliminated,
            )
            standings.append(previous)

        return tuple(standings)

    @classmethod
    def human_won(
        cls,
        standings: Sequence[Standing],
        human_id: int = HUMAN_PLAYER_ID,
    ) -> bool:
        """The human wins the day when ranked first and still in."""
        for row in standings:
            if row.player_id == human_id:
                return row.rank == 1 and not row.eliminated
        return False

    @classmethod
    def find(cls, standings: Sequence[Standing], player_id: int) -> Standing | None:
        for row in standings:
            if row.player_id == player_id:
                return row
        return None
