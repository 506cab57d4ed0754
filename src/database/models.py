"""
Stable Stakes - Database Models

Pydantic models that mirror the Supabase table schemas.
"""

from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, Field


class DayStats(BaseModel):
    """Mirrors the `day_stats` table: one row per day mode."""

    mode: str = Field(pattern="^(half|full)$")
    days_played: int = 0
    wins: int = 0
    best_balance: Decimal | None = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"from_attributes": True}

    def record(self, won: bool, final_balance: Decimal) -> "DayStats":
        """Return a copy updated with one more finished day."""
        best = final_balance
        if self.best_balance is not None and self.best_balance > final_balance:
            best = self.best_balance
        return self.model_copy(update={
            "days_played": self.days_played + 1,
            "wins": self.wins + (1 if won else 0),
            "best_balance": best,
            "updated_at": datetime.now(timezone.utc),
        })
