from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import RLock
from typing import Sequence

from ..errors import StoreUnavailable
from .models import Player, Room
from .registry import PlayerDirectory
from .timer import Scheduler

logger = logging.getLogger(__name__)

PLACEMENT_BONUSES = (50, 30, 15)


@dataclass
class Payout:
    player: Player
    rank: int
    coins_earned: int
    bonus_coins: int

    @property
    def total_coins(self) -> int:
        return self.coins_earned + self.bonus_coins

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "coinsEarned": self.coins_earned,
            "bonusCoins": self.bonus_coins,
            "totalCoins": self.total_coins,
        }


def compute_payouts(players: Sequence[Player], bonuses: Sequence[int] = PLACEMENT_BONUSES) -> list[Payout]:
    """Rank by descending score; ties keep join order."""
    ranked = sorted(players, key=lambda p: p.score, reverse=True)
    payouts = []
    for i, player in enumerate(ranked):
        bonus = bonuses[i] if i < len(bonuses) else 0
        payouts.append(Payout(player=player, rank=i + 1, coins_earned=player.session_coins, bonus_coins=bonus))
    return payouts


class GameSettlement:
    """Credits coins and xp to the profile store once a game is over."""

    def __init__(self, publisher, scheduler: Scheduler, store, directory: PlayerDirectory, lock: RLock) -> None:
        self._publisher = publisher
        self._scheduler = scheduler
        self._store = store
        self._directory = directory
        self._lock = lock

    def settle(self, room: Room) -> list[Payout]:
        payouts = compute_payouts(room.players)
        for payout in payouts:
            total = payout.total_coins
            if total <= 0:
                continue
            player = payout.player
            self._scheduler.spawn(self._credit, player.id, player.uid, player.username, total, player.score)
            if player.id in self._directory:
                self._publisher.game_ended(player.id, payout.to_dict())

        logger.info(
            "Settled room %s: %s",
            room.id,
            ", ".join(f"{p.player.username}#{p.rank}+{p.total_coins}" for p in payouts),
        )
        return payouts

    def _credit(self, player_id: str, uid: str, username: str, coins: int, xp: int) -> None:
        try:
            profile = self._store.credit(uid, coins, xp)
        except StoreUnavailable:
            logger.exception("Failed to update coins for %s (%s)", username, uid)
            return

        if profile is None:
            logger.warning("No profile for %s (%s); %d coins not credited", username, uid, coins)
            return

        with self._lock:
            if player_id not in self._directory:
                return
            self._publisher.profile_update(player_id, profile)
