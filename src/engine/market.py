"""
Stable Stakes - Card Market

Fixed-price card exchange that runs between the scratch and race phases.
All methods are stateless class methods: the market state and the seats
go in, updated copies come out. Rejected actions return None and leave
everything untouched.

Rules:
    - Every listing trades at the same price
    - Per race, each seat may buy at most 2 cards and sell at most 2;
      open listings count against the sell cap before they sell
    - Unsold listings go back to their sellers when the market closes
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Sequence

from src.engine.base import (
    MARKET_BUY_CAP,
    MARKET_PRICE,
    MARKET_SELL_CAP,
    Card,
    Listing,
    Player,
)
from src.engine.ledger import EconomyLedger
from src.engine.policy import ActorPolicy


@dataclass(frozen=True)
class Trade:
    """A completed purchase."""
    listing_id: int
    card: Card
    buyer_id: int
    seller_id: int
    price: Decimal


@dataclass(frozen=True)
class MarketState:
    """
    Listings and completed trades for one race's market.

    Attributes:
        listings: Open listings in the order they were posted
        trades: Completed purchases this race
        next_listing_id: Id given to the next listing
    """
    listings: tuple[Listing, ...] = field(default_factory=tuple)
    trades: tuple[Trade, ...] = field(default_factory=tuple)
    next_listing_id: int = 1

    def bought_by(self, player_id: int) -> int:
        return sum(1 for t in self.trades if t.buyer_id == player_id)

    def sold_by(self, player_id: int) -> int:
        return sum(1 for t in self.trades if t.seller_id == player_id)

    def listed_by(self, player_id: int) -> int:
        return sum(1 for lst in self.listings if lst.seller_id == player_id)

    def sell_capacity(self, player_id: int) -> int:
        """Listings the seat may still post."""
        return MARKET_SELL_CAP - self.sold_by(player_id) - self.listed_by(player_id)

    def is_sold_out(self, player_id: int) -> bool:
        return self.sold_by(player_id) >= MARKET_SELL_CAP

    def get(self, listing_id: int) -> Listing | None:
        for listing in self.listings:
            if listing.id == listing_id:
                return listing
        return None

    @property
    def listed_cards(self) -> tuple[Card, ...]:
        return tuple(lst.card for lst in self.listings)


@dataclass(frozen=True)
class MarketResult:
    """
    Outcome of an accepted market action.

    Attributes:
        players: Updated seats
        market: Updated market
        listing: Listing posted, cancelled or bought
        trade: Completed trade (purchases only)
    """
    players: tuple[Player, ...]
    market: MarketState
    listing: Listing | None = None
    trade: Trade | None = None


def _find(players: Sequence[Player], player_id: int) -> Player | None:
    for p in players:
        if p.id == player_id:
            return p
    return None


def _take_card(player: Player, card: Card) -> Player:
    cards = list(player.cards)
    cards.remove(card)
    return replace(player, cards=tuple(cards))


def _give_card(player: Player, card: Card) -> Player:
    return replace(player, cards=player.cards + (card,))


class MarketEngine:
    """Stateless engine for the card market."""

    PRICE = MARKET_PRICE
    BUY_CAP = MARKET_BUY_CAP
    SELL_CAP = MARKET_SELL_CAP

    @classmethod
    def open(
        cls,
        players: Sequence[Player],
        policy: ActorPolicy,
        next_listing_id: int = 1,
    ) -> MarketResult:
        """
        Open a fresh market and post the AI seats' opening listings.

        Each active AI seat holding more than one card lists the cards
        its policy picks, never its last card and never more than the
        sell cap.
        """
        result = MarketResult(
            players=tuple(players),
            market=MarketState(next_listing_id=next_listing_id),
        )
        for player in players:
            if player.is_human or player.eliminated or len(player.cards) <= 1:
                continue
            picks = policy.choose_listings(player.cards)
            picks = picks[:min(cls.SELL_CAP, len(player.cards) - 1)]
            for card in picks:
                listed = cls.list_card(result.players, result.market, player.id, card)
                if listed is not None:
                    result = listed
        return result

    @classmethod
    def list_card(
        cls,
        players: Sequence[Player],
        market: MarketState,
        seller_id: int,
        card: Card,
    ) -> MarketResult | None:
        """
        Withdraw a card from the seller's hand and post it.

        Returns:
            MarketResult, or None when the seller is missing or
            eliminated, does not hold the card, or has no sell capacity
        """
        seller = _find(players, seller_id)
        if seller is None or seller.eliminated:
            return None
        if card not in seller.cards:
            return None
        if market.sell_capacity(seller_id) <= 0:
            return None

        listing = Listing(id=market.next_listing_id, card=card, seller_id=seller_id)
        updated = tuple(_take_card(p, card) if p.id == seller_id else p for p in players)
        return MarketResult(
            players=updated,
            market=replace(
                market,
                listings=market.listings + (listing,),
                next_listing_id=market.next_listing_id + 1,
            ),
            listing=listing,
        )

    @classmethod
    def cancel_listing(
        cls,
        players: Sequence[Player],
        market: MarketState,
        listing_id: int,
        requester_id: int | None = None,
    ) -> MarketResult | None:
        """
        Return an unsold listing to its seller.

        Args:
            requester_id: When given, only the seller may cancel
        """
        listing = market.get(listing_id)
        if listing is None:
            return None
        if requester_id is not None and listing.seller_id != requester_id:
            return None

        updated = tuple(
            _give_card(p, listing.card) if p.id == listing.seller_id else p
            for p in players
        )
        return MarketResult(
            players=updated,
            market=replace(
                market,
                listings=tuple(lst for lst in market.listings if lst.id != listing_id),
            ),
            listing=listing,
        )

    @classmethod
    def can_buy(
        cls,
        players: Sequence[Player],
        market: MarketState,
        buyer_id: int,
        listing: Listing,
    ) -> bool:
        """Whether a purchase would be accepted right now."""
        buyer = _find(players, buyer_id)
        if buyer is None or buyer.eliminated:
            return False
        if listing.seller_id == buyer_id:
            return False
        if buyer.balance < cls.PRICE:
            return False
        if market.bought_by(buyer_id) >= cls.BUY_CAP:
            return False
        if market.is_sold_out(listing.seller_id):
            return False
        return True

    @classmethod
    def buy_listing(
        cls,
        players: Sequence[Player],
        market: MarketState,
        buyer_id: int,
        listing_id: int,
    ) -> MarketResult | None:
        """
        Buy a listing at the fixed price.

        The price moves from buyer to seller and the card moves into the
        buyer's hand. Solvency is left to the caller.
        """
        listing = market.get(listing_id)
        if listing is None or not cls.can_buy(players, market, buyer_id, listing):
            return None

        updated = EconomyLedger.transfer(players, buyer_id, listing.seller_id, cls.PRICE)
        updated = tuple(_give_card(p, listing.card) if p.id == buyer_id else p for p in updated)
        trade = Trade(
            listing_id=listing.id,
            card=listing.card,
            buyer_id=buyer_id,
            seller_id=listing.seller_id,
            price=cls.PRICE,
        )
        return MarketResult(
            players=updated,
            market=replace(
                market,
                listings=tuple(lst for lst in market.listings if lst.id != listing_id),
                trades=market.trades + (trade,),
            ),
            listing=listing,
            trade=trade,
        )

    @classmethod
    def eligible_listings(
        cls,
        players: Sequence[Player],
        market: MarketState,
        buyer_id: int,
    ) -> list[Listing]:
        """Listings the buyer could purchase right now."""
        return [
            lst for lst in market.listings
            if cls.can_buy(players, market, buyer_id, lst)
        ]

    @classmethod
    def eligible_ai_buyers(
        cls,
        players: Sequence[Player],
        market: MarketState,
    ) -> list[Player]:
        """AI seats with at least one purchasable listing."""
        return [
            p for p in players
            if not p.is_human
            and not p.eliminated
            and cls.eligible_listings(players, market, p.id)
        ]

    @classmethod
    def discard_listings(
        cls,
        market: MarketState,
        seller_ids: Sequence[int],
    ) -> tuple[MarketState, int]:
        """
        Drop open listings of eliminated sellers; their cards leave play.

        Returns:
            Tuple of (updated market, number of cards discarded)
        """
        kept = tuple(lst for lst in market.listings if lst.seller_id not in seller_ids)
        return replace(market, listings=kept), len(market.listings) - len(kept)

    @classmethod
    def close(
        cls,
        players: Sequence[Player],
        market: MarketState,
    ) -> tuple[tuple[Player, ...], int]:
        """
        Return every unsold listing to its seller.

        Returns:
            Tuple of (updated seats, number of cards returned)
        """
        updated = list(players)
        for listing in market.listings:
            for i, p in enumerate(updated):
                if p.id == listing.seller_id:
                    updated[i] = _give_card(p, listing.card)
                    break
        return tuple(updated), len(market.listings)
