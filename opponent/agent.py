"""
Heuristic opponent for the hex conquest game.

The opponent plays through the same rules entrypoints as a human
(select_territory, move, next_turn) and never touches the state directly.
Each turn:

1. Refresh memory and pick a strategy (expand / defend / aggress)
2. Spend every reinforcement on the best-scoring territory, with occasional
   oversights
3. Attack or reposition until nothing scores, the action cap is reached, it
   fails three times running, or it gets tired
4. End the turn

Thinking delays are named suspension points awaited through an injectable
sleep coroutine; with delay_scale=0 a whole turn runs without waiting.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
from typing import Awaitable, Callable, List, Optional, Tuple

from models import OPPONENT, other_side
from opponent.personality import Memory, create_personality
from opponent.scoring import (
    DEFEND, EXPAND, action_candidates, choose_strategy, pick_imperfect,
    reinforcement_candidates,
)
from orders import move, select_territory
from state import GameState, log_event
from upkeep import next_turn

logger = logging.getLogger(__name__)

PATIENT_MAX_ACTIONS = 15
IMPATIENT_MAX_ACTIONS = 25
MAX_CONSECUTIVE_FAILURES = 3
DEFEND_ABSTAIN_CHANCE = 0.2
MOVE_FRACTION_RANGE = (0.5, 0.9)
ATTACK_MEMORY_SPAN = 3  # Turns before a remembered attack origin is forgotten

# Nominal (base, variance) in milliseconds for each suspension point
THINKING_DELAYS = {
    "start": (800, 400),
    "action": (400, 300),
    "reinforce": (150, 100),
    "end": (300, 200),
}
DEFAULT_THINKING_DELAY = (300, 100)


class OpponentAI:
    """Human-like heuristic opponent with a personality and a short memory."""

    def __init__(
        self,
        game_state: GameState,
        difficulty: Optional[str] = "normal",
        rng: Optional[random.Random] = None,
        delay_scale: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        side: str = OPPONENT,
    ):
        self.game_state = game_state
        self.difficulty = difficulty
        self.side = side
        self.rng = rng or random.Random()
        self.delay_scale = delay_scale
        self.sleep = sleep

        self.personality = create_personality(difficulty, self.rng)
        self.memory = Memory()
        self.current_strategy = EXPAND
        self.schedule: List[Tuple[str, float]] = []  # Suspension points of the latest turn

        log_event(game_state, f"Opponent: {self.personality.style} style")

    @property
    def is_expert(self) -> bool:
        return self.difficulty == "expert"

    @property
    def max_actions(self) -> int:
        return PATIENT_MAX_ACTIONS if self.personality.patience else IMPATIENT_MAX_ACTIONS

    def _my_turn(self) -> bool:
        return self.game_state.is_ongoing and self.game_state.current_player == self.side

    async def play_turn(self) -> None:
        """Play one full turn, then hand control back via next_turn()."""
        if not self._my_turn():
            return

        self.memory.turns_played += 1
        self.schedule = []
        self.remember_player_attacks()

        await self.think("start")

        self.update_strategy()
        await self.handle_reinforcements()

        actions_taken = 0
        consecutive_failures = 0

        # Sometimes the opponent tires and stops early (never on expert)
        fatigue_chance = 0 if self.is_expert else min(0.3, self.memory.turns_played * 0.02)
        is_tired = self.rng.random() < fatigue_chance

        while (actions_taken < self.max_actions
               and consecutive_failures < MAX_CONSECUTIVE_FAILURES
               and self.game_state.is_ongoing):
            if is_tired and actions_taken > 3 and self.rng.random() < 0.3:
                logger.debug("Opponent tired after %d actions", actions_taken)
                break

            if self.perform_best_action():
                actions_taken += 1
                consecutive_failures = 0
                await self.think("action")
            else:
                consecutive_failures += 1

        await self.think("end")
        if self.game_state.is_ongoing:
            next_turn(self.game_state)

    def remember_player_attacks(self) -> None:
        """Update memory with attacks the other side made on us since our last turn."""
        enemy = other_side(self.side)
        attacks = [
            record for record in self.game_state.move_history
            if record.player == enemy
            and record.type in ("attack", "conquest")
            and record.defender == self.side
            and record.turn == self.game_state.turn
        ]

        if attacks:
            self.memory.last_attack_origin = attacks[-1].source
            self.memory.turns_since_player_attack = 0
        else:
            self.memory.turns_since_player_attack += 1
            if self.memory.turns_since_player_attack >= ATTACK_MEMORY_SPAN:
                self.memory.last_attack_origin = None

    def update_strategy(self) -> str:
        self.current_strategy = choose_strategy(
            self.game_state, self.side, self.memory, self.personality, self.rng
        )
        logger.debug("Opponent strategy for turn %d: %s", self.game_state.turn, self.current_strategy)
        return self.current_strategy

    def choose_reinforcement(self) -> Optional[int]:
        """Pick the territory for the next reinforcement, or None if we hold nothing."""
        ranked = reinforcement_candidates(self.game_state, self.side, self.current_strategy, self.memory)
        if not ranked:
            return None
        # Top 3 when distracted, top 2 even when focused
        chosen = pick_imperfect(ranked, self.personality.focus_level, self.rng, focused_width=2)
        return chosen.source.id

    async def handle_reinforcements(self) -> None:
        while self._my_turn() and self.game_state.reinforcements_available > 0:
            target_id = self.choose_reinforcement()
            if target_id is None:
                break
            select_territory(self.game_state, target_id, rng=self.rng)
            await self.think("reinforce")

    def perform_best_action(self) -> bool:
        """
        Execute the best attack, or failing that the best repositioning.

        Returns:
            True if an attack was launched or troops moved
        """
        attacks, moves = action_candidates(
            self.game_state, self.side, self.current_strategy, self.personality,
            self.rng, expert=self.is_expert,
        )

        if attacks:
            chosen = pick_imperfect(attacks, self.personality.focus_level, self.rng)
            # A defensive opponent sometimes has second thoughts
            if not (self.current_strategy == DEFEND and self.rng.random() < DEFEND_ABSTAIN_CHANCE):
                select_territory(self.game_state, chosen.source.id, rng=self.rng)
                select_territory(self.game_state, chosen.target.id, rng=self.rng)
                return True

        if moves:
            best = moves[0]
            low, high = MOVE_FRACTION_RANGE
            to_move = math.floor(best.source.units * (low + self.rng.random() * (high - low)))
            if 0 < to_move < best.source.units:
                return move(self.game_state, best.source.id, best.target.id, to_move)

        return False

    def thinking_delay(self, kind: str) -> float:
        """Delay in seconds for a named suspension point."""
        base, variance = THINKING_DELAYS.get(kind, DEFAULT_THINKING_DELAY)
        millis = base * self.personality.thinking_scale + self.rng.random() * variance
        return millis / 1000.0 * self.delay_scale

    async def think(self, kind: str) -> None:
        delay = self.thinking_delay(kind)
        self.schedule.append((kind, delay))
        await self.sleep(delay)
