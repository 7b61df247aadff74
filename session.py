"""
Game session driver for the hex conquest game.

Owns the current GameState and OpponentAI and is the single writer in front of
the rules: human input goes through select_territory / move / next_turn, the
opponent's turn through play_opponent_turn. While the opponent's turn is in
progress the session refuses human input and further opponent turns.

Usage:
    session = GameSession()
    session.create_game('hard')
    session.select_territory(0)        # reinforce
    ...
    session.next_turn()                # hand over to the opponent
    asyncio.run(session.play_opponent_turn())
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Dict, Optional

import orders
import upkeep
from models import OPPONENT, PLAYER
from opponent import OpponentAI
from state import GameState, get_game_summary, initialize_game, load_config

logger = logging.getLogger(__name__)

FLASH_FADE_STEP = 0.05


class GameSession:
    """One local game against the heuristic opponent."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        delay_scale: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = load_config() if config is None else config
        self.delay_scale = self.config.get('thinking_delay_scale', 1.0) if delay_scale is None else delay_scale
        self.sleep = sleep
        self.game_state: Optional[GameState] = None
        self.opponent: Optional[OpponentAI] = None
        self.rng = random.Random()
        self._opponent_turn_in_progress = False

    @property
    def opponent_turn_in_progress(self) -> bool:
        return self._opponent_turn_in_progress

    def create_game(self, difficulty: Optional[str] = None, seed: Optional[int] = None) -> GameState:
        """Start a new game, discarding the previous state and opponent wholesale."""
        if self._opponent_turn_in_progress:
            raise RuntimeError("Cannot restart while the opponent is playing its turn")

        self.rng = random.Random(seed)
        self.game_state = initialize_game(difficulty, seed=seed, config=self.config)
        self.opponent = OpponentAI(
            self.game_state,
            difficulty=self.game_state.difficulty,
            rng=self.rng,
            delay_scale=self.delay_scale,
            sleep=self.sleep,
        )
        logger.info("New game: difficulty=%s seed=%s", self.game_state.difficulty, seed)
        return self.game_state

    def _require_game(self) -> GameState:
        if self.game_state is None:
            raise RuntimeError("No game in progress; call create_game() first")
        return self.game_state

    def _accepts_human_input(self) -> bool:
        game_state = self._require_game()
        if self._opponent_turn_in_progress:
            logger.debug("Human input ignored: opponent turn in progress")
            return False
        return game_state.current_player == PLAYER

    def get_state(self) -> Dict[str, Any]:
        """Read-only snapshot of the current game."""
        return get_game_summary(self._require_game())

    def select_territory(self, territory_id: int) -> bool:
        if not self._accepts_human_input():
            return False
        orders.select_territory(self.game_state, territory_id, rng=self.rng)
        return True

    def move(self, source_id: int, target_id: int, troop_count: Optional[int] = None) -> bool:
        if not self._accepts_human_input():
            return False
        return orders.move(self.game_state, source_id, target_id, troop_count)

    def next_turn(self) -> bool:
        """End the human turn."""
        if not self._accepts_human_input():
            return False
        upkeep.next_turn(self.game_state)
        return True

    @property
    def opponent_to_move(self) -> bool:
        game_state = self._require_game()
        return game_state.is_ongoing and game_state.current_player == OPPONENT

    async def play_opponent_turn(self) -> bool:
        """
        Let the opponent play its turn to completion.

        Returns:
            False if a turn is already in progress or it is not the opponent's
            turn, True once the opponent has finished
        """
        if self._opponent_turn_in_progress or not self.opponent_to_move:
            return False

        self._opponent_turn_in_progress = True
        try:
            await self.opponent.play_turn()
        finally:
            self._opponent_turn_in_progress = False
        return True

    def run_opponent_turn(self) -> bool:
        """Blocking wrapper around play_opponent_turn for synchronous callers."""
        return asyncio.run(self.play_opponent_turn())

    def tick(self, step: float = FLASH_FADE_STEP) -> None:
        """Fade reinforcement/combat flashes; presentation only."""
        for territory in self._require_game().territories:
            if territory.flash > 0:
                territory.flash = max(0.0, territory.flash - step)
